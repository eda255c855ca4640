"""Version scan driver: one address table per distinct image version."""
from __future__ import annotations

from contextlib import AbstractContextManager
from pathlib import Path
from typing import Callable, Iterable

from .constants import IMAGE_SUFFIXES
from .exceptions import SignatureNotFoundError
from .logging_config import log_debug, log_info, log_warning
from .models import BinaryImage, ResolvedAddress, Version, VersionData
from .pe_parsing import open_image
from .progress import ProgressBar
from .strategies import Signature, resolve
from .versioning import version_in_range

ImageOpener = Callable[[Path], AbstractContextManager[BinaryImage]]


def expand_candidates(paths: Iterable[Path]) -> list[Path]:
    """
    Expand directory arguments into their image files.

    Directories contribute their ``.exe``/``.dll`` children sorted by name;
    other paths (including nonexistent ones) pass through in order.

    Args:
        paths: Candidate files or directories

    Returns:
        Flat list of candidate file paths
    """
    result: list[Path] = []
    for path in paths:
        path = Path(path)
        if path.is_dir():
            result.extend(sorted(
                p for p in path.iterdir()
                if p.is_file() and p.suffix.lower() in IMAGE_SUFFIXES
            ))
        else:
            result.append(path)
    return result


def find_addresses(
    image: BinaryImage,
    signatures: list[Signature],
    *,
    strict: bool = False,
) -> tuple[ResolvedAddress, ...]:
    """
    Resolve every signature against one image.

    Args:
        image: Opened image
        signatures: Signatures in declaration order
        strict: Raise instead of recording an absent address

    Returns:
        One ResolvedAddress per signature, in declaration order

    Raises:
        SignatureNotFoundError: If strict and a signature does not match
    """
    results = []
    for sig in signatures:
        address = resolve(sig, image)
        if address is None:
            if strict:
                raise SignatureNotFoundError(sig.name, str(image.path))
            log_warning(f"  {sig.name}: not found")
        else:
            log_debug(f"  {sig.name}: 0x{address:x}")
        results.append(ResolvedAddress(sig.name, address))
    return tuple(results)


def scan_versions(
    paths: Iterable[Path],
    signatures: list[Signature],
    *,
    opener: ImageOpener = open_image,
    min_version: Version | None = None,
    max_version: Version | None = None,
    strict: bool = False,
    show_progress: bool = False,
) -> list[VersionData]:
    """
    Scan candidate images and collect one address table per version.

    Candidates are processed in order, one open image at a time. Missing
    paths are skipped. When several images report the same version, the
    first one processed wins and the rest are ignored.

    Args:
        paths: Candidate image paths
        signatures: Signatures in declaration order
        opener: Context manager factory yielding a BinaryImage for a path
        min_version: Skip images below this version
        max_version: Skip images above this version
        strict: Fail if any signature is missing from an image
        show_progress: Whether to show a progress bar

    Returns:
        VersionData entries sorted ascending by version

    Raises:
        ImageOpenError: If an existing candidate cannot be opened
        ResolutionError: If a strategy reads outside its section
        SignatureNotFoundError: If strict and a signature does not match
    """
    paths = [Path(p) for p in paths]
    processed: set[Version] = set()
    version_data: list[VersionData] = []

    with ProgressBar(len(paths), enabled=show_progress) as progress:
        for path in paths:
            if not path.exists():
                log_debug(f"Skipping missing candidate {path}")
                progress.update(scanned=False)
                continue

            with opener(path) as image:
                version = image.version

                if version in processed:
                    log_debug(f"Skipping {path}: version {version} already processed")
                    progress.update(scanned=False)
                    continue

                if not version_in_range(version, min_version, max_version):
                    log_info(f"Skipping {path}: version {version} out of range")
                    progress.update(scanned=False)
                    continue

                log_info(f"VERSION {version}: {path.resolve()}")
                addresses = find_addresses(image, signatures, strict=strict)

            processed.add(version)
            version_data.append(VersionData(version, path, addresses))
            progress.update(scanned=True)

    version_data.sort(key=lambda vd: vd.version)
    return version_data
