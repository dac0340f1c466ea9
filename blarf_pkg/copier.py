"""
Recursive directory copy used to mirror static assets into the site.
"""

import os
import shutil
import logging

from .errors import CopyError

logger = logging.getLogger('blarf.copier')


def copy_tree(src: str, dest: str) -> int:
    """
    Mirror the contents of ``src`` into ``dest``, which must already exist.

    Subdirectories are created (or reused) under ``dest`` and copied
    recursively; regular files are copied byte for byte, overwriting any file of
    the same name. Within each directory, subdirectories are handled before
    files and both in name order. Symlinks to files are copied as the file they
    point to; anything else that is not a regular file is skipped.

    Returns the number of files copied.

    Raises:
        CopyError: on the first entry that cannot be listed, created or copied.
    """
    try:
        names = sorted(os.listdir(src))
    except (IOError, OSError) as e:
        raise CopyError(src, dest, e) from e

    # Symlinked directories are not followed.
    dirs = [
        name for name in names
        if os.path.isdir(os.path.join(src, name)) and not os.path.islink(os.path.join(src, name))
    ]
    files = [name for name in names if name not in dirs]

    copied = 0
    for name in dirs:
        src_path = os.path.join(src, name)
        dest_path = os.path.join(dest, name)
        try:
            os.makedirs(dest_path, exist_ok=True)
        except (IOError, OSError) as e:
            raise CopyError(src_path, dest_path, e) from e
        copied += copy_tree(src_path, dest_path)

    for name in files:
        src_path = os.path.join(src, name)
        dest_path = os.path.join(dest, name)
        if not os.path.isfile(src_path):
            logger.debug(f"Skipping non-regular file: {src_path}")
            continue
        try:
            shutil.copyfile(src_path, dest_path)
        except (IOError, OSError) as e:
            raise CopyError(src_path, dest_path, e) from e
        logger.debug(f"Copied {src_path} -> {dest_path}")
        copied += 1

    return copied
