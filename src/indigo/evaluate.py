"""Plant-health image analysis evaluation.

Layout of the images directory::

    test-images/
    ├── ground-truth.json     # {"image1.jpg": {"condition": "healthy", "plant": "tomato"}, ...}
    ├── image1.jpg
    └── image2.jpg

Accuracy counts condition matches only.
"""

from __future__ import annotations

import base64
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from indigo.errors import ConfigurationError, IndigoError

if TYPE_CHECKING:
    from indigo.clients.base import ModelClient

logger = logging.getLogger(__name__)

GROUND_TRUTH_FILENAME = "ground-truth.json"

EVALUATION_PROMPT = """\
Analyze this plant image. Identify:
1. Plant type (if possible)
2. Health condition (healthy, diseased, pest damage, stressed)
3. Specific issues (if any)

Respond in JSON format: { "plant": "...", "condition": "...", "issue": "..." }"""


@dataclass
class ImageResult:
    image: str
    expected: dict
    predicted: dict = field(default_factory=dict)
    error: str | None = None

    @property
    def correct(self) -> bool:
        if self.error is not None:
            return False
        expected = str(self.expected.get("condition") or "").lower()
        predicted = str(self.predicted.get("condition") or "").lower()
        return predicted == expected


@dataclass
class EvaluationReport:
    provider: str
    results: list[ImageResult] = field(default_factory=list)

    @property
    def correct(self) -> int:
        return sum(1 for r in self.results if r.correct)

    @property
    def total(self) -> int:
        return len(self.results)

    @property
    def accuracy(self) -> float:
        return self.correct / self.total * 100 if self.total else 0.0


def load_ground_truth(images_dir: Path) -> dict[str, dict]:
    path = images_dir / GROUND_TRUTH_FILENAME
    try:
        data = json.loads(path.read_text(encoding="utf-8"))
    except (OSError, ValueError) as e:
        raise ConfigurationError(
            f"Error loading ground truth file. Please create {path}", details={"cause": str(e)}
        ) from e
    if not isinstance(data, dict):
        raise ConfigurationError(f"{path} must map image names to expectations")
    return data


def parse_prediction(response: str, expected: dict) -> dict:
    """Parse a JSON answer; otherwise fall back to keyword matching."""
    try:
        prediction = json.loads(response)
        if isinstance(prediction, dict):
            return prediction
    except ValueError:
        pass

    text = response.lower()
    plant = str(expected.get("plant") or "")
    return {
        "plant": plant if plant.lower() in text else "unknown",
        "condition": "healthy" if "healthy" in text else "diseased",
    }


async def evaluate_images(client: ModelClient, images_dir: Path) -> EvaluationReport:
    """Run every ground-truth image through the client's image analysis."""
    ground_truth = load_ground_truth(images_dir)
    report = EvaluationReport(provider=client.name)

    for image_name, truth in ground_truth.items():
        result = ImageResult(image=image_name, expected=truth)
        try:
            image_b64 = base64.b64encode((images_dir / image_name).read_bytes()).decode("ascii")
            response = await client.analyze_image(image_b64, EVALUATION_PROMPT)
            result.predicted = parse_prediction(response, truth)
        except (OSError, IndigoError) as e:
            logger.warning("Evaluation of %s failed: %s", image_name, e)
            result.error = str(e)
        report.results.append(result)

    logger.info(
        "Evaluation (%s): %d/%d correct (%.2f%%)",
        report.provider,
        report.correct,
        report.total,
        report.accuracy,
    )
    return report


def format_report(report: EvaluationReport) -> str:
    lines = ["Indigo Image Analysis Evaluation", f"Provider: {report.provider}", ""]
    for r in report.results:
        lines.append(f"Testing: {r.image}")
        lines.append(f"  Expected: {r.expected.get('condition', '')} {r.expected.get('plant', '')}")
        if r.error is not None:
            lines.append(f"  Error: {r.error}")
        else:
            lines.append(
                f"  Predicted: {r.predicted.get('condition', '')} {r.predicted.get('plant', '')}"
            )
            lines.append("  Correct" if r.correct else "  Incorrect")
        lines.append("")
    lines.append(f"Results: {report.correct}/{report.total} correct ({report.accuracy:.2f}% accuracy)")
    return "\n".join(lines)
