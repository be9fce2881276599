from .logger import ProbeLogger, LoggerConfig, ColoredFormatter, \
    CONSOLE_FORMAT, FILE_FORMAT, TRACE

from .sync import CancelToken, Handoff, Wake

from .transport import UdpSession, ProbeError, ResolutionError, BindError, \
    DialError, SendError, SocketClosedError, resolve_address, \
    format_address, MAX_DATAGRAM_SIZE
