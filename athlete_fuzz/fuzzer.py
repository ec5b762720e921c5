"""
Sequential run loop for the athlete endpoint fuzzing framework
"""

import logging
from typing import List, Optional, Sequence, Tuple

from athlete_fuzz.config import Config
from athlete_fuzz.endpoint_tester import EndpointTester
from athlete_fuzz.fuzz_generator import MatrixGenerator
from athlete_fuzz.models import AthleteInput, RunSummary, TestResult
from athlete_fuzz.utils import ResultAnalyzer, ResultLog

logger = logging.getLogger(__name__)


class AthleteFuzzer:
    """Main fuzzer class"""

    def __init__(self, config: Config, log_path: Optional[str] = None,
                 generator: Optional[MatrixGenerator] = None):
        self.config = config
        self.tester = EndpointTester(config.endpoint)
        self.generator = generator or MatrixGenerator()
        self.result_log = ResultLog(log_path or config.run.log_file)
        self.analyzer = ResultAnalyzer(config.run.output_dir)

    async def setup(self):
        """Open the HTTP session and start a fresh log"""
        if not self.config.endpoint.base_url:
            logger.warning("BASE_URL is not set, every request will fail")
        self.result_log.reset()
        logger.info(f"Setting up session for {self.config.endpoint.base_url or '<empty>'}")
        await self.tester.connect()

    async def run_fuzz_test(self, test_cases: Optional[Sequence[AthleteInput]] = None,
                            id_offset: int = 0) -> Tuple[List[TestResult], RunSummary]:
        """Run every test case in order, one request at a time"""
        if test_cases is None:
            test_cases = self.generator.generate_test_cases()
        logger.info(f"Running {len(test_cases)} test cases...")

        results = []
        summary = RunSummary.empty()
        for i, test_input in enumerate(test_cases):
            test_id = f"test_{id_offset + i + 1:04d}"

            result = await self.tester.run_test(test_id, test_input)

            results.append(result)
            summary = summary.add(result)
            self.result_log.write_entry(result)

            if result.success:
                logger.info(f"✓ {test_id} passed ({result.status}, {result.elapsed_ms:.1f} ms)")
            else:
                logger.warning(f"⚠️  {test_id} failed ({result.status}): {result.error}")

        return results, summary

    def report(self, summary: RunSummary, results: Optional[List[TestResult]] = None,
               title: str = "Athlete Endpoint Test Report") -> str:
        """Print the run report and optionally persist it with the raw results"""
        report = self.analyzer.generate_report(summary, results, title=title)
        print(report)
        if self.config.run.save_json:
            if results is not None:
                self.analyzer.save_results(results)
            self.analyzer.save_report(report)
        return report

    async def cleanup(self):
        """Close the HTTP session"""
        logger.info("Cleaning up...")
        await self.tester.disconnect()

    async def run(self, test_cases: Optional[Sequence[AthleteInput]] = None, id_offset: int = 0,
                  title: str = "Athlete Endpoint Test Report") -> RunSummary:
        """Setup, run, report and clean up; returns the run summary"""
        try:
            await self.setup()
            results, summary = await self.run_fuzz_test(test_cases, id_offset=id_offset)
        finally:
            await self.cleanup()

        self.report(summary, results, title=title)
        logger.info(f"Test completed. Total tests: {summary.total}, failures: {summary.failure_count}")
        return summary
