import json
from pathlib import Path
from typing import Optional, Union

from loguru import logger

from portfolio_tracker.models.records import PortfolioView

def write_snapshot(path: Union[str, Path], view: PortfolioView) -> Path:
    """Replace the widget data file with `view`; readers never see a partial file."""
    target = Path(path)
    target.parent.mkdir(parents=True, exist_ok=True)
    tmp = target.with_suffix(target.suffix + ".tmp")
    # pydantic writes NaN/Infinity as null, which keeps the file valid JSON
    tmp.write_text(view.model_dump_json(by_alias=True), encoding="utf-8")
    tmp.replace(target)
    logger.info(f"Wrote portfolio snapshot to {target}")
    return target

def read_snapshot(path: Union[str, Path]) -> Optional[dict]:
    p = Path(path)
    try:
        with p.open("r", encoding="utf-8") as f:
            return json.load(f)
    except (OSError, ValueError) as e:
        logger.warning(f"Snapshot {p} unreadable: {e}")
        return None
