import logging
import os
import platform
import tempfile
from pathlib import Path
from typing import Optional, Union

from pydantic import ValidationError

from oauth.errors import TokenNotFoundError, TokenStoreError
from oauth.models import StoredToken
from settings import CONFIG_DIR, DEFAULT_PROFILE

logger = logging.getLogger(__name__)

_UNSAFE_CHARS = ("\\", "/", ":", " ")


def safe_name(profile: str) -> str:
    """Sanitize a profile name for use as a file name key"""
    s = (profile or "").strip()
    if not s:
        return DEFAULT_PROFILE
    for ch in _UNSAFE_CHARS:
        s = s.replace(ch, "_")
    return s


def ensure_secure_directory(directory: Path) -> Path:
    """Create a directory with owner-only permissions if missing"""
    if not directory.exists():
        directory.mkdir(parents=True, exist_ok=True)
        # Set directory permissions to 700 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(directory, 0o700)
    return directory


def write_private_file(path: Path, content: str) -> None:
    """Write a file atomically (temp file + rename) with 0600 permissions"""
    ensure_secure_directory(path.parent)
    fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as f:
            f.write(content)
        # Set file permissions to 600 on Unix-like systems
        if platform.system() != "Windows":
            os.chmod(tmp_name, 0o600)
        os.replace(tmp_name, path)
    except BaseException:
        try:
            os.unlink(tmp_name)
        except FileNotFoundError:
            pass
        raise


class TokenStorage:
    """Per-profile token records stored as token_<profile>.json files"""

    def __init__(self, config_dir: Optional[Union[str, Path]] = None):
        self.config_dir = Path(config_dir if config_dir else CONFIG_DIR)

    def token_path(self, profile: str) -> Path:
        """Path of the record file for a profile"""
        return self.config_dir / f"token_{safe_name(profile)}.json"

    def load(self, profile: str) -> StoredToken:
        """Load the token record for a profile

        Raises:
            TokenNotFoundError: No record exists (profile never logged in)
            TokenStoreError: The record could not be read or parsed
        """
        path = self.token_path(profile)
        try:
            raw = path.read_text(encoding="utf-8")
        except FileNotFoundError:
            raise TokenNotFoundError(profile) from None
        except OSError as e:
            raise TokenStoreError(f"failed to read token file {path}: {e}") from e

        try:
            return StoredToken.model_validate_json(raw)
        except ValidationError as e:
            raise TokenStoreError(f"failed to parse token file {path}: {e}") from e

    def save(self, profile: str, record: StoredToken) -> None:
        """Overwrite the token record for a profile

        Raises:
            TokenStoreError: The record could not be written
        """
        path = self.token_path(profile)
        try:
            write_private_file(path, record.model_dump_json(indent=2))
        except OSError as e:
            raise TokenStoreError(f"failed to write token file {path}: {e}") from e
        logger.debug(f"Saved token for profile {profile!r} to {path}")

    def delete(self, profile: str) -> None:
        """Remove the token record; a missing record is not an error"""
        path = self.token_path(profile)
        try:
            path.unlink(missing_ok=True)
        except OSError as e:
            raise TokenStoreError(f"failed to remove token file {path}: {e}") from e
        logger.info(f"Removed token for profile {profile!r}")
