"""Export analysis results to CSV and JSON."""

from __future__ import annotations

import json
import logging
from dataclasses import asdict
from pathlib import Path

import pandas as pd

from workforce_forecast.analysis.annual_series import summaries_to_frame
from workforce_forecast.data.contracts import AnalysisResults

logger = logging.getLogger(__name__)


def export_results(results: AnalysisResults, output_dir: Path) -> list[Path]:
    """Write annual summaries, prediction and forecast to output_dir.

    Files:
        annual_summaries.csv: One row per year.
        prediction.csv: One row for the projected year (omitted if none).
        forecast.json: Narrative summary, trend, confidence, insights.

    Args:
        results: Complete pipeline output.
        output_dir: Destination directory (created if missing).

    Returns:
        Paths of the files written.
    """
    output_dir.mkdir(parents=True, exist_ok=True)
    written: list[Path] = []

    summaries_path = output_dir / "annual_summaries.csv"
    summaries_to_frame(results.summaries).to_csv(summaries_path)
    logger.info(
        "Exported %s (%d rows)", summaries_path.name, len(results.summaries)
    )
    written.append(summaries_path)

    if results.prediction is not None:
        prediction_path = output_dir / "prediction.csv"
        pd.DataFrame([asdict(results.prediction)]).to_csv(
            prediction_path, index=False,
        )
        logger.info("Exported %s", prediction_path.name)
        written.append(prediction_path)

    forecast_path = output_dir / "forecast.json"
    payload = {
        "company": {"name": results.company_name, "code": results.company_code},
        **asdict(results.forecast),
    }
    forecast_path.write_text(
        json.dumps(payload, ensure_ascii=False, indent=2), encoding="utf-8"
    )
    logger.info("Exported %s", forecast_path.name)
    written.append(forecast_path)

    return written
