import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Optional
from fastapi import APIRouter, HTTPException, Request
from pydantic import BaseModel

from ..models.config import ParsedConfig
from ..models.device import Vendor
from ..core.analyzer import ConfigAnalyzer
from ..core.auditor import ConfigAuditor

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api")
analyzer = ConfigAnalyzer()
auditor = ConfigAuditor()
executor = ThreadPoolExecutor(max_workers=4)

DEFAULT_MAX_CONFIG_BYTES = 5 * 1024 * 1024


# Request/Response Models
class ParseRequest(BaseModel):
    content: str
    vendor: str
    file_name: Optional[str] = None


async def _parse(request: Request, body: ParseRequest) -> ParsedConfig:
    """Validate a parse request and run the parser off the event loop."""
    if not body.content.strip():
        raise HTTPException(status_code=400, detail="Configuration content is empty")

    config = getattr(request.app.state, "config", {})
    max_bytes = config.get("parser", {}).get("max_config_bytes", DEFAULT_MAX_CONFIG_BYTES)
    size = len(body.content.encode("utf-8"))
    if size > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"Configuration is {size} bytes, limit is {max_bytes}"
        )

    loop = asyncio.get_running_loop()
    try:
        return await loop.run_in_executor(
            executor, analyzer.analyze_config, body.content, body.vendor, body.file_name
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))


@router.get("/vendors")
async def list_vendors():
    """List the vendors a configuration can be parsed for."""
    return {"vendors": [v.value for v in Vendor if v in analyzer.PARSERS]}


@router.post("/parse")
async def parse_config(request: Request, body: ParseRequest):
    """Parse a configuration into the normalized device record."""
    parsed = await _parse(request, body)
    return {"parsed": parsed.to_dict()}


@router.post("/analyze")
async def analyze_config(request: Request, body: ParseRequest):
    """Parse a configuration and run the local audit checks against it."""
    parsed = await _parse(request, body)
    findings = auditor.run_local_analysis(parsed)
    logger.info("Analyzed %s: %d findings", body.file_name or parsed.hostname, len(findings))

    return {
        "parsed": parsed.to_dict(),
        "summary": analyzer.get_config_summary(parsed),
        "findings": [f.model_dump(by_alias=True, mode="json") for f in findings],
    }
