"""
Fill .docx report templates with resolved placeholders and images.

Templates in the wild use two tag styles: ``{%Replace_Address}`` and
``{{ Replace_Address }}``. Rendering is tried in a fixed order and the first
attempt that succeeds wins:

  1. ``{%`` ... ``}`` tags, values inserted as-is
  2. ``{%`` ... ``}`` tags, values escaped with newlines turned into Word breaks
  3. ``{{`` ... ``}}`` tags, values escaped with newlines turned into Word breaks

Every attempt opens a fresh DocxTemplate from the original bytes. For the
``{%`` style, tags are rewritten into ``{{ }}`` before docxtpl patches the
part XML, so row loops work in either style:

  {%tr for sale in comparableSales %} ... {%tr endfor %}
"""

import io
import logging
import os
import re
import shutil
import tempfile
from dataclasses import dataclass
from typing import Any, Iterable, List, Optional, Sequence, Set

from docx.shared import Emu
from docxtpl import DocxTemplate, InlineImage, Listing
from jinja2 import ChainableUndefined, Environment, pass_context
from jinja2.exceptions import UndefinedError

from valuation_app.core.config import settings
from valuation_app.core.exceptions import RenderError
from valuation_app.services.placeholders import ResolvedPlaceholders, normalize_placeholder
from valuation_app.utils.validation import to_data_uri

logger = logging.getLogger(__name__)

EMU_PER_PIXEL = 9525

# Tags of this shape are treated as image slots even when no image option declares them
_IMAGE_TAG_RE = re.compile(r"^Image\d+$")

_XML_TAG_RE = re.compile(r"<[^>]+>")
_INTER_TAG_SPACE_RE = re.compile(r">\s+<")
_PERCENT_TAG_RE = re.compile(r"\{%((?:<[^>]*>|[^<}])*)\}")
_PERCENT_STATEMENT_OR_TAG_RE = re.compile(r"\{%[^{}]*%\}|\{%[^{}%]*\}")
_IDENTIFIER_RE = re.compile(r"^[A-Za-z_]\w*(?:\.[A-Za-z_]\w*)*$")
_FREE_FORM_NAME_RE = re.compile(r'^[^{}%"\\]+$')

# Run markup between the two characters of an opening delimiter
_SPLIT_OPENING_RE = re.compile(r"(?<=\{)(<[^>]*>)+(?=%)")



@dataclass(frozen=True)
class DelimiterPair:
    start: str
    end: str


PERCENT_DELIMITERS = DelimiterPair("{%", "}")
BRACE_DELIMITERS = DelimiterPair("{{", "}}")


@dataclass(frozen=True)
class RenderAttempt:
    number: int
    delimiters: DelimiterPair
    normalize_linebreaks: bool


RENDER_ATTEMPTS = (
    RenderAttempt(1, PERCENT_DELIMITERS, False),
    RenderAttempt(2, PERCENT_DELIMITERS, True),
    RenderAttempt(3, BRACE_DELIMITERS, True),
)


@dataclass
class TagProblem:
    """One problem found while scanning template tags"""
    kind: str
    explanation: str


class TemplateTagError(Exception):
    """Template tags could not be parsed under the active delimiters"""

    def __init__(self, errors: List[TagProblem]):
        self.errors = errors
        super().__init__("; ".join(e.explanation for e in errors))


@dataclass
class RenderImage:
    """Image bytes to place at a placeholder, sized in pixels"""
    placeholder: str
    content: bytes
    width: Optional[float] = None
    height: Optional[float] = None
    extension: str = ".png"


@dataclass
class RenderedDocument:
    content: bytes
    replaced_count: int
    attempt: int
    images_replaced: int = 0

    def data_uri(self) -> str:
        return to_data_uri(self.content)


@dataclass
class _StagedImage:
    key: str
    path: str
    width: float
    height: float


@dataclass
class _AttemptFailure:
    attempt: RenderAttempt
    error: Exception
    explanation: str = ""


def _text_of(fragment: str) -> str:
    return _XML_TAG_RE.sub("", _INTER_TAG_SPACE_RE.sub("><", fragment))


def _snippet(text: str, limit: int = 40) -> str:
    text = " ".join(text.split())
    return text if len(text) <= limit else text[:limit] + "..."


def rewrite_percent_tags(xml: str) -> str:
    """
    Rewrite ``{%name}`` tags in document XML into Jinja ``{{ name }}`` tags.

    Tags split across Word runs are joined; the run markup inside a tag is kept
    after the rewritten tag so the XML stays balanced. ``{%... %}`` statements
    (row loops, conditions) are left for Jinja.

    Raises:
        TemplateTagError: listing every unclosed, unopened or malformed tag
    """
    problems: List[TagProblem] = []

    plain = _PERCENT_STATEMENT_OR_TAG_RE.sub("", _text_of(xml))
    if "}" in plain:
        index = plain.index("}")
        problems.append(TagProblem(
            "unopened_tag",
            f"Unopened tag near '{_snippet(plain[max(index - 30, 0):index + 1])}'",
        ))

    def replace(match):
        body = match.group(1)
        text = _text_of(body)
        if text.rstrip().endswith("%"):
            return match.group(0)
        if "</w:p>" in body:
            problems.append(TagProblem("unclosed_tag", f"Unclosed tag '{{%{_snippet(text)}'"))
            return match.group(0)
        name = text.strip()
        markup = "".join(_XML_TAG_RE.findall(body))
        if _IDENTIFIER_RE.match(name):
            return "{{ " + name + " }}" + markup
        if _FREE_FORM_NAME_RE.match(name):
            return '{{ placeholder("' + name + '") }}' + markup
        problems.append(TagProblem("malformed_tag", f"Malformed tag '{{%{_snippet(text)}}}'"))
        return match.group(0)

    rewritten = _PERCENT_TAG_RE.sub(replace, xml)

    if "{%" in _PERCENT_STATEMENT_OR_TAG_RE.sub("", _text_of(rewritten)):
        problems.append(TagProblem("unclosed_tag", "Unclosed tag: '{%' without a closing '}'"))

    if problems:
        raise TemplateTagError(problems)
    return rewritten


def _word_text(text: str) -> Listing:
    """Escaped text whose line breaks docxtpl turns into Word breaks"""
    return Listing(text.replace("\r\n", "\n").replace("\r", "\n"))


class ReportTemplate(DocxTemplate):
    """A DocxTemplate opened for one rendering attempt"""

    def __init__(self, template: bytes, attempt: RenderAttempt):
        super().__init__(io.BytesIO(template))
        self.attempt = attempt
        self.images_inserted = 0

    def patch_xml(self, src_xml):
        if self.attempt.delimiters == PERCENT_DELIMITERS:
            src_xml = rewrite_percent_tags(_SPLIT_OPENING_RE.sub("", src_xml))
        return super().patch_xml(src_xml)


class ReportImage(InlineImage):
    """InlineImage that records on its template each time it is placed"""

    def __str__(self):
        xml = super().__str__()
        self.tpl.images_inserted += 1
        return xml


def is_image_key(name: str, image_keys: Set[str]) -> bool:
    return name in image_keys or bool(_IMAGE_TAG_RE.match(name))


def _undefined_for(image_keys: Set[str]):
    """Undefined type rendering unknown tags as "" but failing on empty image slots"""

    class PlaceholderUndefined(ChainableUndefined):
        __slots__ = ()

        def __str__(self):
            name = self._undefined_name
            if isinstance(name, str) and is_image_key(name, image_keys):
                raise UndefinedError(f"Image placeholder '{name}' has no image bound to it")
            return ""

    return PlaceholderUndefined


@pass_context
def _placeholder(context, name):
    return context.resolve(name)


def explain_error(error: Exception) -> str:
    """
    Best-effort human readable message for a rendering failure.

    Errors carrying a list of sub-errors report the first one; XML errors
    report the first parser message.
    """
    errors = getattr(error, "errors", None)
    if isinstance(errors, list) and errors:
        first = errors[0]
        return getattr(first, "explanation", None) or str(first)

    error_log = getattr(error, "error_log", None)
    if error_log is not None:
        entries = list(error_log)
        if entries:
            return f"Invalid document XML after substitution: {entries[0].message}"

    return getattr(error, "message", None) or str(error) or error.__class__.__name__


class DocumentRenderer:
    """Renders templates through the fixed sequence of fallback attempts"""

    def __init__(self, default_width: Optional[int] = None, default_height: Optional[int] = None):
        self.default_width = default_width or settings.DEFAULT_IMAGE_WIDTH
        self.default_height = default_height or settings.DEFAULT_IMAGE_HEIGHT

    def render(
        self,
        template: bytes,
        placeholders: ResolvedPlaceholders,
        images: Sequence[RenderImage] = (),
        image_placeholders: Iterable[str] = (),
    ) -> RenderedDocument:
        """
        Render a template

        Args:
            template: Original .docx bytes
            placeholders: Resolved text values and comparable sales rows
            images: Images to place, keyed by placeholder
            image_placeholders: Every placeholder known to be an image slot,
                bound or not

        Returns:
            RenderedDocument from the first successful attempt

        Raises:
            RenderError: if all attempts fail; the message explains the last failure
        """
        staging_dir = tempfile.mkdtemp(prefix="report-images-")
        failures: List[_AttemptFailure] = []
        try:
            staged = self._stage_images(staging_dir, images)
            image_keys = {normalize_placeholder(p) for p in image_placeholders}
            image_keys.update(image.key for image in staged)

            for attempt in RENDER_ATTEMPTS:
                try:
                    content, inserted = self._render_attempt(template, attempt, placeholders, staged, image_keys)
                except Exception as e:
                    failure = _AttemptFailure(attempt, e, explain_error(e))
                    failures.append(failure)
                    logger.warning(
                        f"Render attempt {attempt.number} failed: {failure.explanation}",
                        extra={"render_attempt": attempt.number},
                    )
                    continue

                logger.info(
                    f"Rendered template on attempt {attempt.number} with {inserted} images",
                    extra={"render_attempt": attempt.number},
                )
                return RenderedDocument(
                    content=content,
                    replaced_count=placeholders.populated_count + inserted,
                    attempt=attempt.number,
                    images_replaced=inserted,
                )
        finally:
            self._cleanup(staging_dir)

        last = failures[-1]
        raise RenderError(
            f"Failed to render the document: {last.explanation}",
            attempts=[f.explanation for f in failures],
        )

    def _render_attempt(self, template, attempt, placeholders, staged, image_keys):
        tpl = ReportTemplate(template, attempt)
        context = {
            key: self._prepare(value, attempt.normalize_linebreaks)
            for key, value in placeholders.values.items()
        }
        for image in staged:
            context[image.key] = ReportImage(
                tpl,
                image.path,
                width=Emu(int(round(image.width * EMU_PER_PIXEL))),
                height=Emu(int(round(image.height * EMU_PER_PIXEL))),
            )

        jinja_env = Environment(undefined=_undefined_for(image_keys))
        jinja_env.globals["placeholder"] = _placeholder

        tpl.render(context, jinja_env)

        if staged and tpl.images_inserted == 0:
            raise TemplateTagError([TagProblem(
                "image_not_inserted",
                "No image placeholder was substituted; the template tags may use other delimiters",
            )])

        output = io.BytesIO()
        tpl.save(output)
        return output.getvalue(), tpl.images_inserted

    def _prepare(self, value: Any, normalize_linebreaks: bool) -> Any:
        if isinstance(value, str):
            return _word_text(value) if normalize_linebreaks else value
        if isinstance(value, list):
            return [self._prepare(item, normalize_linebreaks) for item in value]
        if isinstance(value, dict):
            return {k: self._prepare(v, normalize_linebreaks) for k, v in value.items()}
        return value

    def _stage_images(self, staging_dir: str, images: Sequence[RenderImage]) -> List[_StagedImage]:
        staged = []
        for index, image in enumerate(images):
            key = normalize_placeholder(image.placeholder)
            extension = image.extension if image.extension.startswith(".") else f".{image.extension}"
            path = os.path.join(staging_dir, f"{index}{extension}")
            with open(path, "wb") as f:
                f.write(image.content)
            staged.append(_StagedImage(
                key=key,
                path=path,
                width=image.width or self.default_width,
                height=image.height or self.default_height,
            ))
        return staged

    def _cleanup(self, staging_dir: str) -> None:
        try:
            shutil.rmtree(staging_dir)
        except OSError as e:
            logger.warning(f"Failed to remove staged images in {staging_dir}: {e}")
