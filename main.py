import base64
import logging
import os
from typing import Any, Dict, List, Optional
from urllib.parse import urlparse

import requests
from fastapi import FastAPI, HTTPException
from pydantic import BaseModel, Field, ValidationError

from accessibility_check import CheckParameters
from check_results import SuppressionRule
from color_contrast_analyzer import ScreenshotColorSource
from errors import AccessibilityCheckError
from layout_parser import hierarchy_from_dict, parse_uiautomator_xml
from settings import configure_logging, load_settings
from static_a11y_framework import StaticAccessibilityAnalyzer

logger = logging.getLogger(__name__)

app = FastAPI()


class AccessibilityCheckRequest(BaseModel):
    xml_url: str
    image_url: Optional[str] = None
    density: float = Field(default=1.0, gt=0)
    preset: Optional[str] = None
    check_ids: Optional[List[str]] = None
    mark_issues: bool = False


class HierarchyCheckRequest(BaseModel):
    hierarchy: Dict[str, Any]
    preset: Optional[str] = None
    check_ids: Optional[List[str]] = None
    suppress: List[str] = []
    touch_target_size_dp: Optional[int] = Field(default=None, gt=0)
    text_contrast_ratio: Optional[float] = Field(default=None, ge=1.0, le=21.0)


def get_file_content(file_path_or_url: str, is_image: bool = False) -> str:
    if file_path_or_url.startswith(('http://', 'https://')):
        # It's a URL
        try:
            response = requests.get(file_path_or_url, timeout=30)
            response.raise_for_status()
            content = response.content
        except requests.exceptions.RequestException as e:
            raise HTTPException(status_code=400, detail=f"Error fetching file from URL: {e}")
    else:
        # It's a local file path
        if not os.path.exists(file_path_or_url):
            raise HTTPException(status_code=400, detail=f"File not found: {file_path_or_url}")
        try:
            with open(file_path_or_url, 'rb') as file:
                content = file.read()
        except IOError as e:
            raise HTTPException(status_code=400, detail=f"Error reading file: {e}")

    if is_image:
        # Return base64-encoded string for images
        return base64.b64encode(content).decode('utf-8')
    else:
        # Return string for XML content
        return content.decode('utf-8')


def _selection(preset: Optional[str], check_ids: Optional[List[str]]):
    if check_ids is not None:
        return check_ids
    return preset


def _override(requested, configured):
    return requested if requested is not None else configured


def _run(analyzer: StaticAccessibilityAnalyzer, selection, **kwargs) -> List:
    try:
        return analyzer.run_checks(selection, **kwargs)
    except (KeyError, ValueError) as e:
        raise HTTPException(status_code=400, detail=f"Invalid check selection: {e}")


@app.get("/health")
async def health_check():
    return {"status": "healthy"}


@app.post("/invoke")
async def check_accessibility_endpoint(request_body: AccessibilityCheckRequest):
    settings = load_settings()
    logger.info(f"Checking layout {request_body.xml_url}")
    xml_content = get_file_content(request_body.xml_url)

    color_source = None
    image_name = "screen"
    if request_body.image_url:
        image_content_base64 = get_file_content(request_body.image_url, is_image=True)
        try:
            color_source = ScreenshotColorSource.from_base64(image_content_base64)
        except ValueError as e:
            raise HTTPException(status_code=400, detail=str(e))
        # Extract image name without extension
        parsed_url = urlparse(request_body.image_url)
        image_name = os.path.splitext(os.path.basename(parsed_url.path))[0]

    try:
        hierarchy = parse_uiautomator_xml(
            xml_content,
            screen_size=color_source.size if color_source else None,
            density=request_body.density,
        )
    except AccessibilityCheckError as e:
        raise HTTPException(status_code=400, detail=f"Invalid layout: {e}")

    analyzer = StaticAccessibilityAnalyzer(hierarchy, color_source, settings, image_name)
    results = _run(analyzer, _selection(request_body.preset, request_body.check_ids))
    report = analyzer.generate_report(results)
    if request_body.mark_issues and color_source is not None:
        report['marked_images'] = analyzer.mark_issues(results)
    return report


@app.post("/check")
async def check_hierarchy_endpoint(request_body: HierarchyCheckRequest):
    settings = load_settings()
    try:
        hierarchy = hierarchy_from_dict(request_body.hierarchy)
    except AccessibilityCheckError as e:
        raise HTTPException(status_code=400, detail=f"Invalid hierarchy: {e}")

    parameters = CheckParameters(
        custom_touch_target_size=_override(request_body.touch_target_size_dp,
                                           settings.touch_target_size_dp),
        custom_text_contrast_ratio=_override(request_body.text_contrast_ratio,
                                             settings.text_contrast_ratio),
    )
    suppressions = settings.suppression_rules() + [
        SuppressionRule(check_id=check_id, reason="suppressed by request")
        for check_id in request_body.suppress
    ]

    analyzer = StaticAccessibilityAnalyzer(hierarchy, settings=settings)
    results = _run(analyzer, _selection(request_body.preset, request_body.check_ids),
                   parameters=parameters, suppressions=suppressions)
    return analyzer.generate_report(results)


def main():
    import uvicorn
    try:
        settings = load_settings()
    except ValidationError as e:
        raise SystemExit(f"Invalid configuration: {e}")
    configure_logging(settings.log_level)
    uvicorn.run(app, host="0.0.0.0", port=8000)


if __name__ == "__main__":
    main()
