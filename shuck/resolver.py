import os
import stat
from typing import Optional, Sequence


def has_access(pathname: str, mode: int) -> bool:
    """Permisos del usuario efectivo sobre `pathname` (os.R_OK, os.W_OK, os.X_OK)."""
    return os.access(pathname, mode, effective_ids=os.access in os.supports_effective_ids)


def is_executable(pathname: str) -> bool:
    """Existe, es un fichero regular y el usuario efectivo puede ejecutarlo."""
    try:
        st = os.stat(pathname)
    except OSError:
        return False
    if not stat.S_ISREG(st.st_mode):
        return False
    return has_access(pathname, os.X_OK)


def resolve(name: str, search_path: Sequence[str]) -> Optional[str]:
    # Un nombre con "/" se usa tal cual; se comprueba más tarde.
    if "/" in name:
        return name

    for directory in search_path:
        candidate = os.path.join(directory, name)
        if is_executable(candidate):
            return candidate
    return None
