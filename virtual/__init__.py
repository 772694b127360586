from .context import ResponseAlreadySent
from .facade import Facade, create, default
from .model import RequestDescriptor, SettledResult
from .util import all_or_fail, all_settled, rejected, resolved, spread, then
