from .objects import Config, Result, Cycle, Outcome
from .payload import PayloadGenerator
from .model import Pinger, Statistics
from .server import EchoServer
from .lifecycle import Lifecycle, run_client, run_server
