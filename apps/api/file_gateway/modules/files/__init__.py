from .errors import EmptyBatchError, InvalidContentError, InvalidPathError, NotFoundError, StorageError, StorageIOError
from .results import Failure, OperationResult, Success
from .service import StorageGateway, get_gateway, reset_gateway
