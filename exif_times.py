"""
Read the capture time a file already carries, and write it back where missing.

Read priority (first plausible value wins):
  EXIF  DateTimeOriginal > DateTimeDigitized > Image.DateTime
  XMP   exif:DateTimeOriginal > xmp:CreateDate > photoshop:DateCreated
  JSON  Google Takeout sidecar photoTakenTime.timestamp   (opt-in)
"""

import glob
import json
import logging
import re
from pathlib import Path
from typing import Optional

import piexif
from PIL import Image, ImageFile
from pillow_heif import register_heif_opener

from timestamps import parse_exif_datetime, plausible, to_exif_string

ImageFile.LOAD_TRUNCATED_IMAGES = True
register_heif_opener()

logger = logging.getLogger(__name__)

# formats piexif.load understands (JPEG, TIFF-based, WebP)
PIEXIF_READABLE = {'.jpg', '.jpeg', '.jfif', '.tif', '.tiff', '.dng', '.webp'}
# formats piexif.insert can write into
PIEXIF_WRITABLE = {'.jpg', '.jpeg', '.jfif', '.webp'}

EXIF_IFD_POINTER = 0x8769
TAG_DATETIME = 306
TAG_DATETIME_ORIGINAL = 36867
TAG_DATETIME_DIGITIZED = 36868

XMP_KEYS = ("exif:DateTimeOriginal", "xmp:CreateDate", "photoshop:DateCreated")
XMP_SCAN_BYTES = 512 * 1024
XMP_PACKET_RE = re.compile(rb'<x:xmpmeta.*?</x:xmpmeta>', re.DOTALL)

# <base>.<ext>.<anything>[(n)].json, n = duplicate counter of the media file
SIDECAR_RE = re.compile(
    r'^(?P<base>.+)\.(?P<ext>[^.]+)\.[^.]*?(?:\((?P<dup>\d+)\))?\.json$',
    flags=re.IGNORECASE
)
DUP_MEDIA_RE = re.compile(r'^(?P<base>.+)\((?P<dup>\d+)\)(?P<ext>\.[^.]+)$')


def _first_plausible(values, now: Optional[int]) -> Optional[int]:
    for raw in values:
        t = parse_exif_datetime(raw)
        if plausible(t, now):
            return t
    return None


def _piexif_values(path: Path):
    exif = piexif.load(str(path))
    return [
        exif.get("Exif", {}).get(piexif.ExifIFD.DateTimeOriginal),
        exif.get("Exif", {}).get(piexif.ExifIFD.DateTimeDigitized),
        exif.get("0th", {}).get(piexif.ImageIFD.DateTime),
    ]


def _pillow_values(path: Path):
    with Image.open(path) as img:
        exif = img.getexif()
        sub = exif.get_ifd(EXIF_IFD_POINTER)
        return [
            sub.get(TAG_DATETIME_ORIGINAL),
            sub.get(TAG_DATETIME_DIGITIZED),
            exif.get(TAG_DATETIME),
        ]


def read_exif_time(path: Path, now: Optional[int] = None) -> Optional[int]:
    path = Path(path)
    try:
        if path.suffix.lower() in PIEXIF_READABLE:
            values = _piexif_values(path)
        else:
            values = _pillow_values(path)
    except Exception as e:
        # videos, unsupported or broken files simply have no EXIF for us
        logger.debug(f"No EXIF for {path}: {e}")
        return None
    return _first_plausible(values, now)


def read_xmp_packet(path: Path) -> Optional[str]:
    try:
        with Path(path).open("rb") as f:
            head = f.read(XMP_SCAN_BYTES)
    except OSError as e:
        logger.debug(f"Cannot read {path}: {e}")
        return None
    m = XMP_PACKET_RE.search(head)
    if not m:
        return None
    return m.group(0).decode("utf-8", errors="ignore")


def xmp_value(packet: str, key: str) -> Optional[str]:
    """Value of ``key`` written either as an attribute or as an element."""
    k = re.escape(key)
    m = re.search(rf'{k}\s*=\s*"([^"]*)"', packet) or re.search(rf'<{k}>([^<]*)</{k}>', packet)
    return m.group(1) if m else None


def read_xmp_time(path: Path, now: Optional[int] = None) -> Optional[int]:
    packet = read_xmp_packet(path)
    if not packet:
        return None
    return _first_plausible((xmp_value(packet, k) for k in XMP_KEYS), now)


def sidecar_media_name(json_name: str) -> Optional[str]:
    """
    Media file a Takeout sidecar belongs to:
      IMG_1234.jpg.supplemental-metadata.json     -> IMG_1234.jpg
      IMG_1234.jpg.supplemental-metadata(1).json  -> IMG_1234(1).jpg
    """
    m = SIDECAR_RE.match(json_name)
    if not m:
        return None
    base, ext, dup = m.group('base'), m.group('ext'), m.group('dup')
    return f"{base}({dup}).{ext}" if dup else f"{base}.{ext}"


def find_json_sidecar(path: Path) -> Optional[Path]:
    path = Path(path)
    direct = path.with_name(path.name + ".json")
    if direct.is_file():
        return direct

    # duplicates keep the counter out of the sidecar prefix: IMG_1234(1).jpg -> IMG_1234.jpg(1).json
    prefixes = [path.name]
    dup = DUP_MEDIA_RE.match(path.name)
    if dup:
        original = dup.group('base') + dup.group('ext')
        legacy = path.with_name(f"{original}({dup.group('dup')}).json")
        if legacy.is_file():
            return legacy
        prefixes.append(original)

    candidates = set()
    for prefix in prefixes:
        candidates.update(path.parent.glob(glob.escape(prefix) + ".*.json"))
    for candidate in sorted(candidates):
        owner = sidecar_media_name(candidate.name)
        if owner and owner.lower() == path.name.lower() and candidate.is_file():
            return candidate
    return None


def read_sidecar_time(path: Path, now: Optional[int] = None) -> Optional[int]:
    """Return photoTakenTime.timestamp from the Takeout JSON sidecar, or None."""
    sidecar = find_json_sidecar(path)
    if sidecar is None:
        return None
    try:
        with sidecar.open("r", encoding="utf-8") as f:
            meta = json.load(f)
        ts = int(meta.get("photoTakenTime", {}).get("timestamp", 0))
    except (OSError, ValueError, TypeError, AttributeError) as e:
        logger.debug(f"Bad sidecar {sidecar}: {e}")
        return None
    return ts if plausible(ts, now) else None


def read_shot_time(path: Path, use_json_sidecar: bool = False, now: Optional[int] = None) -> Optional[int]:
    t = read_exif_time(path, now)
    if t is None:
        t = read_xmp_time(path, now)
    if t is None and use_json_sidecar:
        t = read_sidecar_time(path, now)
    return t


def can_write_exif(path: Path) -> bool:
    return Path(path).suffix.lower() in PIEXIF_WRITABLE


def write_exif_if_missing(path: Path, t: int) -> bool:
    """
    Fill DateTimeOriginal / DateTimeDigitized / Image.DateTime with ``t``
    where absent. Existing values are never touched. Returns True only if
    the file was rewritten.
    """
    path = Path(path)
    if not can_write_exif(path):
        return False
    try:
        exif = piexif.load(str(path))
        exif.setdefault("0th", {})
        exif.setdefault("Exif", {})
        encoded = to_exif_string(t).encode("utf-8")

        changed = False
        for ifd, tag in (("Exif", piexif.ExifIFD.DateTimeOriginal),
                         ("Exif", piexif.ExifIFD.DateTimeDigitized),
                         ("0th", piexif.ImageIFD.DateTime)):
            if tag not in exif[ifd]:
                exif[ifd][tag] = encoded
                changed = True

        if changed:
            piexif.insert(piexif.dump(exif), str(path))
        return changed
    except Exception as e:
        logger.info(f"EXIF write failed for {path}: {e}")
        return False
