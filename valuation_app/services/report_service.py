"""Report generation: resolve form data, render the template, archive the result"""

import logging
import os
from typing import Dict

from valuation_app.schemas.options import (
    CHATTELS_BRIEF_PLACEHOLDER,
    CONSTRUCTION_BRIEF_PLACEHOLDER,
    ImageConfig,
)
from valuation_app.schemas.reports import GenerateReportRequest, GenerateReportResponse, ImagePlacement
from valuation_app.services.config_store import card_text
from valuation_app.services.document_renderer import RenderImage
from valuation_app.services.placeholders import (
    normalize_placeholder,
    resolve_placeholders,
    schema_from_structure,
)
from valuation_app.services.record_stores import address_from_data

logger = logging.getLogger(__name__)


class ReportService:
    """Turns a completed inspection form into a rendered .docx report"""

    def __init__(self, templates, config_store, history_store, renderer):
        self.templates = templates
        self.config_store = config_store
        self.history_store = history_store
        self.renderer = renderer

    def generate(self, request: GenerateReportRequest) -> GenerateReportResponse:
        """
        Generate a report from a template

        Raises:
            NotFoundError: if the template or an image does not exist
            InvalidInputError: if a file name is unsafe
            RenderError: if every rendering attempt fails
        """
        template = self.templates.read_template(request.templateFileName)

        schema = schema_from_structure(self.config_store.get_json_structure())
        global_content = self.config_store.get_global_content().model_dump()
        resolved = resolve_placeholders(
            request.data,
            schema,
            global_content=global_content,
            extra_text=self._extra_text(request),
        )

        image_sizes = self.config_store.image_sizes()
        images = [self._load_image(placement, image_sizes) for placement in request.images]

        rendered = self.renderer.render(
            template,
            resolved,
            images=images,
            image_placeholders=image_sizes.keys(),
        )

        report_name = None
        if request.saveReport:
            base_name = address_from_data(request.data) or os.path.splitext(request.templateFileName)[0]
            report_name = self.templates.save_report(rendered.content, base_name)

        draft_id = request.draftId
        if request.saveHistory:
            record = self.history_store.save(
                request.data,
                draft_id=request.draftId,
                if_replace_text=resolved.populated_count > 0,
                if_replace_image=rendered.images_replaced > 0,
            )
            draft_id = record.draftId

        logger.info(
            f"Generated report from {request.templateFileName}: "
            f"{rendered.replaced_count} replacements on attempt {rendered.attempt}"
        )
        return GenerateReportResponse(
            generatedDocxDataUri=rendered.data_uri(),
            replacementsCount=rendered.replaced_count,
            imagesReplaced=rendered.images_replaced,
            attempt=rendered.attempt,
            reportName=report_name,
            draftId=draft_id,
        )

    def _extra_text(self, request: GenerateReportRequest) -> Dict[str, str]:
        extra: Dict[str, str] = {}
        brief = self.config_store.get_construction_brief()
        if brief.brief:
            extra[CONSTRUCTION_BRIEF_PLACEHOLDER] = brief.brief
        if brief.chattelsBrief:
            extra[CHATTELS_BRIEF_PLACEHOLDER] = brief.chattelsBrief
        if request.selections:
            cards = self.config_store.get_commentary_cards() + self.config_store.get_multi_options()
            extra.update(card_text(cards, request.selections))
        extra.update(request.textReplacements)
        return extra

    def _load_image(self, placement: ImagePlacement, image_sizes: Dict[str, ImageConfig]) -> RenderImage:
        key = normalize_placeholder(placement.placeholder)
        option = image_sizes.get(key)
        width = placement.width or (option.width if option else None)
        height = placement.height or (option.height if option else None)
        return RenderImage(
            placeholder=key,
            content=self.templates.read_image(placement.imageName),
            width=width,
            height=height,
            extension=os.path.splitext(placement.imageName)[1] or ".png",
        )

