"""
Utility functions for the athlete endpoint fuzzing framework
"""

import json
import logging
import math
import os
from datetime import datetime
from typing import Any, Dict, List, Optional

import numpy as np

from athlete_fuzz.models import AthleteOutput, RunSummary, TestResult

logger = logging.getLogger(__name__)

LOG_SEPARATOR = "-------------------------------"


class ResultAnalyzer:
    """Analyze and report test results"""

    def __init__(self, output_dir: str = "results"):
        self.output_dir = output_dir

    def save_results(self, results: List[TestResult], filename: str = None):
        """Save test results to file"""
        os.makedirs(self.output_dir, exist_ok=True)
        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"athlete_results_{timestamp}_{os.getpid()}.json"

        output_path = os.path.join(self.output_dir, filename)

        serializable_results = []
        for result in results:
            serializable_results.append({
                "test_id": result.test_id,
                "input": result.test_input.to_payload(),
                "success": result.success,
                "status": result.status,
                "response": self._make_serializable(result.data),
                "elapsed_ms": result.elapsed_ms,
                "error": result.error,
            })

        with open(output_path, 'w', encoding='utf-8') as f:
            json.dump(serializable_results, f, indent=2, ensure_ascii=False)

        logger.info(f"Results saved to {output_path}")
        return output_path

    def _make_serializable(self, obj: Any) -> Any:
        """Convert object to JSON serializable format"""
        if isinstance(obj, (list, tuple)):
            return [self._make_serializable(item) for item in obj]
        elif isinstance(obj, dict):
            return {key: self._make_serializable(value) for key, value in obj.items()}
        elif isinstance(obj, (int, float, str, bool, type(None))):
            return obj
        else:
            return str(obj)

    def latency_percentiles(self, summary: RunSummary) -> Dict[str, float]:
        """p50/p95/p99 of per-request elapsed times; empty for an empty run"""
        if not summary.elapsed_times:
            return {}
        values = np.percentile(np.asarray(summary.elapsed_times, dtype=float), [50, 95, 99])
        return {"p50": float(values[0]), "p95": float(values[1]), "p99": float(values[2])}

    def count_expected_shape(self, results: List[TestResult]) -> int:
        """Number of successful responses that parse as AthleteOutput"""
        return sum(
            1 for r in results
            if r.success and AthleteOutput.from_payload(r.data) is not None
        )

    def generate_report(self, summary: RunSummary, results: Optional[List[TestResult]] = None,
                        title: str = "Athlete Endpoint Test Report") -> str:
        """Generate a human readable summary of a run"""
        average = summary.average_elapsed_ms
        average_text = "N/A" if math.isnan(average) else f"{average:.2f} ms"

        report = f"""
=== {title} ===

Summary:
- Total test cases: {summary.total}
- Successful tests: {summary.success_count}
- Failed tests: {summary.failure_count}
- Total test time: {summary.total_elapsed_ms:.2f} ms
- Average response time: {average_text}
"""

        percentiles = self.latency_percentiles(summary)
        if percentiles:
            report += "\nLatency Percentiles:\n"
            for name, value in percentiles.items():
                report += f"- {name}: {value:.2f} ms\n"

        if results is not None:
            matching = self.count_expected_shape(results)
            report += f"\nResponses matching expected output shape: {matching}/{summary.success_count}\n"

        if summary.failures:
            report += "\nFailed Tests:\n"
            for i, result in enumerate(summary.failures, 1):
                response = json.dumps(self._make_serializable(result.data), ensure_ascii=False)
                report += (
                    f"{i}. {result.test_id} [{result.status}] {result.test_input.describe()}\n"
                    f"   Response: {response}\n"
                )
                if result.error:
                    report += f"   Error: {result.error}\n"

        return report

    def save_report(self, report: str, filename: str = None):
        """Save report to file"""
        os.makedirs(self.output_dir, exist_ok=True)
        if filename is None:
            timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
            filename = f"athlete_report_{timestamp}_{os.getpid()}.txt"

        output_path = os.path.join(self.output_dir, filename)

        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(report)

        logger.info(f"Report saved to {output_path}")
        return output_path


class ResultLog:
    """Append-only plain text log with one entry per executed test case"""

    def __init__(self, path: str = "test-results.txt"):
        self.path = path

    def reset(self):
        """Truncate the log at the start of a run"""
        with open(self.path, 'w', encoding='utf-8'):
            pass

    def write_entry(self, result: TestResult):
        entry = (
            f"\n[{result.test_id}] {result.test_input.describe()}\n"
            f"Request:\n{json.dumps(result.test_input.to_payload(), indent=2)}\n"
            f"Response:\n{json.dumps(result.data if result.data is not None else {}, indent=2, default=str)}\n"
            f"Status code: {result.status}\n"
            f"{LOG_SEPARATOR}\n"
        )
        with open(self.path, 'a', encoding='utf-8') as f:
            f.write(entry)
