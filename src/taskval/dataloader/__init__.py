from taskval.dataloader.config_loader import ConfigLoader
from taskval.dataloader.dataset_loader import DatasetLoader, parse_list_cell
from taskval.dataloader.postload_handler import LoadResultHandler
from taskval.dataloader.rules_loader import RulesLoader, read_rules_payload
from taskval.dataloader.types import LoadResult

__all__ = [
    "ConfigLoader",
    "DatasetLoader",
    "LoadResult",
    "LoadResultHandler",
    "RulesLoader",
    "parse_list_cell",
    "read_rules_payload",
]
