"""Metrics sinks: where MetricsSamples are handed off.

Samples are emitted one at a time as they are captured, never batched and
never retried. A failing sink is logged and otherwise ignored so a
reporting problem can never fail a measurement.
"""

import json
import logging
from abc import ABC, abstractmethod
from datetime import datetime
from pathlib import Path
from typing import IO, Iterable, List, Optional

from pageperf.models.perf_models import MetricsSample, RunReport

logger = logging.getLogger(__name__)


class MetricsSink(ABC):
    """Receiver for captured samples."""

    @abstractmethod
    def emit(self, sample: MetricsSample) -> None:
        """Accept one sample."""
        pass

    def close(self) -> None:
        """Release any resources held by the sink."""
        pass


class InMemorySink(MetricsSink):
    """Keep samples in a list, in emission order."""

    def __init__(self):
        self.samples: List[MetricsSample] = []

    def emit(self, sample: MetricsSample) -> None:
        self.samples.append(sample)


class JsonLinesSink(MetricsSink):
    """Append each sample as one JSON line to a file in output_dir."""

    def __init__(self, output_dir: str = "perf-reports", file_name: Optional[str] = None):
        """Initialize the sink.

        Args:
            output_dir: Directory to write the samples file in
            file_name: File name (timestamped if omitted)
        """
        self.output_dir = Path(output_dir)
        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        self.path = self.output_dir / (file_name or f"samples_{timestamp}.jsonl")
        self._file: Optional[IO[str]] = None

    def emit(self, sample: MetricsSample) -> None:
        if self._file is None:
            self.output_dir.mkdir(parents=True, exist_ok=True)
            self._file = open(self.path, "a", encoding="utf-8")
            logger.info(f"Writing samples to {self.path}")
        self._file.write(sample.model_dump_json() + "\n")
        self._file.flush()

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None


class FanOutSink(MetricsSink):
    """Forward every sample to several sinks.

    Each sink is isolated: one failing does not stop the others.
    """

    def __init__(self, sinks: Iterable[MetricsSink]):
        self.sinks = list(sinks)

    def emit(self, sample: MetricsSample) -> None:
        for sink in self.sinks:
            emit_sample(sink, sample)

    def close(self) -> None:
        for sink in self.sinks:
            try:
                sink.close()
            except Exception as e:
                logger.warning(f"Failed to close sink {type(sink).__name__}: {e}")


def emit_sample(sink: Optional[MetricsSink], sample: MetricsSample) -> bool:
    """Hand a sample to a sink, logging instead of raising on failure.

    Returns:
        True if the sink accepted the sample
    """
    if sink is None:
        return False
    try:
        sink.emit(sample)
        return True
    except Exception as e:
        logger.warning(
            f"Failed to emit sample for {sample.scenario_name!r} "
            f"to {type(sink).__name__}: {e}"
        )
        return False


def write_run_report(report: RunReport, output_dir: str = "perf-reports") -> Path:
    """Write the run report as JSON.

    Returns:
        Path to the written report
    """
    directory = Path(output_dir)
    directory.mkdir(parents=True, exist_ok=True)
    timestamp = report.started_at.strftime("%Y%m%d_%H%M%S")
    path = directory / f"run_{timestamp}_{report.run_id}.json"

    data = json.loads(report.model_dump_json())
    data["summary"] = {
        "passed": len(report.passed),
        "failed": len(report.failed),
        "skipped": len(report.skipped),
        "aborted": report.aborted,
    }
    with open(path, "w", encoding="utf-8") as f:
        json.dump(data, f, indent=2)

    logger.info(f"Run report written: {path}")
    return path
