"""External singleton factory registry.

Reads the artifact layout published with the safe singleton factory:
``<root>/<chain id>/deployment.json``. Files are read on lookup, so a
malformed artifact only matters for the chain that needs it.
"""

import json
import logging
from pathlib import Path

from deployconf.chains.registry import ChainId
from deployconf.exceptions import ConfigurationError, MalformedFactoryRecordError
from deployconf.factory.records import SingletonFactoryRecord

logger = logging.getLogger(__name__)

DEPLOYMENT_FILE = "deployment.json"


class SingletonFactoryRegistry:
    """Lookup of factory records by chain id in an artifacts directory.

    Parameters
    ----------
    root : Path | str
        Directory holding one sub-directory per chain id.

    Raises
    ------
    ConfigurationError
        If the directory does not exist.
    """

    def __init__(self, root: Path | str):
        self.root = Path(root).expanduser().absolute()
        if not self.root.is_dir():
            raise ConfigurationError(f"Singleton factory registry not found: {self.root}")

    def deployment_path(self, chain_id: ChainId) -> Path:
        return self.root / str(int(chain_id)) / DEPLOYMENT_FILE

    def lookup(self, chain_id: ChainId) -> SingletonFactoryRecord | None:
        """Return the record for a chain, or None if the registry has none.

        Raises
        ------
        MalformedFactoryRecordError
            If the artifact exists but is not a valid record.
        """
        path = self.deployment_path(chain_id)
        if not path.exists():
            logger.debug("No singleton factory artifact at %s", path)
            return None

        try:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
        except json.JSONDecodeError as e:
            raise MalformedFactoryRecordError(f"Invalid JSON in {path}: {e}") from e
        except (UnicodeDecodeError, OSError) as e:
            raise MalformedFactoryRecordError(f"Cannot read {path}: {e}") from e

        return SingletonFactoryRecord.parse(chain_id, data)

    def __contains__(self, chain_id: object) -> bool:
        try:
            return self.deployment_path(ChainId(chain_id)).exists()
        except ValueError:
            return False
