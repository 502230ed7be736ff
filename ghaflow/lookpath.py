"""Search for executables along PATH-style variables."""

from __future__ import annotations

import errno
import ntpath
import os
import posixpath
import stat
from collections.abc import Callable

Getenv = Callable[[str], str]

_NOT_FOUND_UNIX = "executable file not found in $PATH"
_NOT_FOUND_WINDOWS = "executable file not found in %PATH%"
_NOT_FOUND_PLAN9 = "executable file not found in $path"
_DEFAULT_WINDOWS_EXTS = [".com", ".exe", ".bat", ".cmd"]
_PLAN9_DIRECT_PREFIXES = ("/", "#", "./", "../")


class LookPathError(Exception):
    """Raised when an executable cannot be found; ``cause`` holds the reason."""

    def __init__(self, name: str, cause: Exception) -> None:
        super().__init__(str(cause))
        self.name = name
        self.cause = cause


def _default_getenv(name: str) -> str:
    return os.environ.get(name, "")


def _check_executable(path: str) -> None:
    """Raise OSError unless ``path`` is a file with an execute bit."""
    mode = os.stat(path).st_mode
    if not stat.S_ISDIR(mode) and mode & 0o111:
        return
    raise PermissionError(errno.EACCES, "permission denied", path)


def _clean_join(directory: str, file: str) -> str:
    return posixpath.normpath(posixpath.join(directory, file))


def look_path_unix(file: str, getenv: Getenv | None = None) -> str:
    """Find ``file`` the way a Unix shell does."""
    getenv = getenv or _default_getenv
    if "/" in file:
        try:
            _check_executable(file)
        except OSError as exc:
            raise LookPathError(file, exc) from exc
        return file
    path = getenv("PATH")
    for directory in path.split(":") if path else []:
        candidate = _clean_join(directory or ".", file)
        try:
            _check_executable(candidate)
        except OSError:
            continue
        return candidate
    raise LookPathError(file, FileNotFoundError(_NOT_FOUND_UNIX))


def look_path_plan9(file: str, getenv: Getenv | None = None) -> str:
    """Find ``file`` using Plan 9 rules and the ``path`` variable."""
    getenv = getenv or _default_getenv
    if file.startswith(_PLAN9_DIRECT_PREFIXES):
        try:
            _check_executable(file)
        except OSError as exc:
            raise LookPathError(file, exc) from exc
        return file
    path = getenv("path")
    for directory in path.split("\x00") if path else []:
        candidate = _clean_join(directory, file)
        try:
            _check_executable(candidate)
        except OSError:
            continue
        return candidate
    raise LookPathError(file, FileNotFoundError(_NOT_FOUND_PLAN9))


def _split_list_windows(path: str) -> list[str]:
    """Split a Windows path list on ';' outside double quotes."""
    if not path:
        return []
    parts: list[str] = []
    current: list[str] = []
    quoted = False
    for char in path:
        if char == '"':
            quoted = not quoted
            current.append(char)
        elif char == ";" and not quoted:
            parts.append("".join(current))
            current = []
        else:
            current.append(char)
    parts.append("".join(current))
    return [part.replace('"', "") for part in parts]


def _windows_extensions(pathext: str) -> list[str]:
    if not pathext:
        return list(_DEFAULT_WINDOWS_EXTS)
    return [
        ext if ext.startswith(".") else "." + ext
        for ext in pathext.lower().split(";")
        if ext
    ]


def _check_windows(path: str) -> None:
    if stat.S_ISDIR(os.stat(path).st_mode):
        raise PermissionError(errno.EACCES, "permission denied", path)


def _exists_windows(path: str) -> bool:
    try:
        _check_windows(path)
    except OSError:
        return False
    return True


def _has_ext(file: str) -> bool:
    dot = file.rfind(".")
    if dot < 0:
        return False
    return max(file.rfind(sep) for sep in ":\\/") < dot


def _find_windows(file: str, exts: list[str]) -> str:
    if not exts:
        _check_windows(file)
        return file
    if _has_ext(file) and _exists_windows(file):
        return file
    for ext in exts:
        candidate = file + ext
        if _exists_windows(candidate):
            return candidate
    raise FileNotFoundError(errno.ENOENT, "file does not exist", file)


def _join_windows(directory: str, file: str) -> str:
    return ntpath.normpath(ntpath.join(directory, file))


def look_path_windows(file: str, getenv: Getenv | None = None) -> str:
    """Find ``file`` using Windows rules, PATHEXT and the path variable."""
    getenv = getenv or _default_getenv
    exts = _windows_extensions(getenv("PATHEXT"))
    if any(sep in file for sep in ":\\/"):
        try:
            return _find_windows(file, exts)
        except OSError as exc:
            raise LookPathError(file, exc) from exc
    try:
        return _find_windows(_join_windows(".", file), exts)
    except OSError:
        pass
    for directory in _split_list_windows(getenv("path")):
        try:
            return _find_windows(_join_windows(directory, file), exts)
        except OSError:
            continue
    raise LookPathError(file, FileNotFoundError(_NOT_FOUND_WINDOWS))


def look_path(file: str, getenv: Getenv | None = None) -> str:
    """Find ``file`` with the rules of the running platform."""
    if os.name == "nt":
        return look_path_windows(file, getenv)
    return look_path_unix(file, getenv)