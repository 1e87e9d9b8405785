from typing import List

from fastapi import APIRouter, Depends
from fastapi.responses import PlainTextResponse

from backend.models.scans import ScanEntry, ScanReport
from backend.services.scan_log import ScanLog
from backend.services.storage import JsonStateStore

router = APIRouter()

# Single shared log for the app
SCAN_LOG = ScanLog(store=JsonStateStore())

def get_scan_log() -> ScanLog:
    return SCAN_LOG

@router.post("/scans", response_model=ScanEntry, status_code=201)
def report_scan(report: ScanReport, log: ScanLog = Depends(get_scan_log)):
    return log.append(report)

@router.get("/scans", response_model=List[ScanEntry])
def list_scans(log: ScanLog = Depends(get_scan_log)):
    return log.list()

@router.get("/scans/text", response_class=PlainTextResponse)
def scans_text(log: ScanLog = Depends(get_scan_log)):
    return log.text()

@router.delete("/scans")
def clear_scans(log: ScanLog = Depends(get_scan_log)):
    return {"cleared": log.clear()}
