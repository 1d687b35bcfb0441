import codecs
import io
import logging
import re
import zipfile
from dataclasses import dataclass
from typing import Mapping

from .errors import UnrecognizedFormat

logger = logging.getLogger(__name__)

TOKENS: tuple[str, ...] = tuple(f"RMGC{i}" for i in range(1, 21))

# DOCX body/headers/footers and the two ODT text parts. Nothing else is touched.
_TEXT_PART = re.compile(
    r"^(?:word/(?:document|header\d*|footer\d*)\.xml|content\.xml|styles\.xml)$",
    re.IGNORECASE,
)


@dataclass(frozen=True)
class RewriteResult:
    data: bytes
    substitutions: int


def is_text_part(name: str) -> bool:
    return _TEXT_PART.match(name) is not None


def _decode(payload: bytes) -> tuple[str, str] | None:
    """Decode an XML part as UTF-16 when it carries a UTF-16 BOM, else as UTF-8.

    Returns None when the bytes are not valid in that encoding.
    """
    encoding = "utf-16" if payload.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)) else "utf-8"
    try:
        return payload.decode(encoding), encoding
    except UnicodeDecodeError:
        return None


def substitute_tokens(text: str, values: Mapping[str, str]) -> tuple[str, int]:
    """Replace every RMGC token in `text`, in ascending token order.

    Each token pass runs over the output of the previous one, so a value that
    contains a later token's literal text is substituted again. Tokens missing
    from `values` are replaced with an empty string.
    """
    count = 0
    for token in TOKENS:
        hits = text.count(token)
        if not hits:
            continue
        value = values.get(token)
        text = text.replace(token, "" if value is None else str(value))
        count += hits
    return text, count


def rewrite_archive(data: bytes, values: Mapping[str, str]) -> RewriteResult:
    """Substitute tokens inside the XML text parts of an office document archive.

    Members that are not text parts are written back with the same content,
    compression method and position. Raises UnrecognizedFormat when `data` is
    not a ZIP container or holds no recognized text part.
    """
    try:
        source = zipfile.ZipFile(io.BytesIO(data))
    except zipfile.BadZipFile as e:
        raise UnrecognizedFormat("template is not a zip archive") from e

    with source:
        members = source.infolist()
        parts = [m.filename for m in members if is_text_part(m.filename)]
        if not parts:
            raise UnrecognizedFormat("no document, header, footer, content or styles part")
        logger.debug("Rewriting %d text parts: %s", len(parts), ", ".join(parts))

        buf = io.BytesIO()
        total = 0
        with zipfile.ZipFile(buf, "w") as target:
            for info in members:
                try:
                    payload = source.read(info)
                except (zipfile.BadZipFile, NotImplementedError) as e:
                    raise UnrecognizedFormat(f"cannot read member {info.filename}") from e
                if is_text_part(info.filename):
                    decoded = _decode(payload)
                    if decoded is None:
                        # Undecodable parts are copied through untouched.
                        logger.warning("Skipping %s: not valid UTF-8 or UTF-16 text", info.filename)
                    else:
                        text, encoding = decoded
                        text, hits = substitute_tokens(text, values)
                        payload = text.encode(encoding)
                        total += hits
                target.writestr(info, payload)

    return RewriteResult(data=buf.getvalue(), substitutions=total)
