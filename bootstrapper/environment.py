"""
The parameters file read by the etcd unit.
"""
import logging
import os
from pathlib import Path
from typing import Mapping, Union

from bootstrapper.errors import WriteError

logger = logging.getLogger(__name__)


def exists(path: Union[str, Path]) -> bool:
    return Path(path).exists()


def write(params: Mapping[str, str], path: Union[str, Path]):
    """
    Atomically replace `path` with one ``KEY=VALUE`` line per parameter.

    Raises:
        WriteError: The file or its temporary copy could not be written.
    """
    path = Path(path)
    tmp = path.with_name(path.name + ".tmp")
    logger.debug("Writing environment variables to %s", tmp)
    try:
        with tmp.open("w") as f:
            for key, value in params.items():
                f.write(f"{key}={value}\n")
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp, path)
    except OSError as e:
        tmp.unlink(missing_ok=True)
        raise WriteError(f"Unable to write {path}: {e}") from e
    except BaseException:
        tmp.unlink(missing_ok=True)
        raise
    logger.info("Wrote %s", path)
