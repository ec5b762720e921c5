"""
Process-per-chunk orchestration for the athlete endpoint fuzzing framework
"""

import asyncio
import glob
import logging
import multiprocessing
import os
import signal
from dataclasses import dataclass, field
from typing import Callable, List, Optional, Sequence

from athlete_fuzz.config import Config
from athlete_fuzz.fuzzer import AthleteFuzzer
from athlete_fuzz.models import AthleteInput, RunSummary
from athlete_fuzz.utils import ResultLog

logger = logging.getLogger(__name__)


def chunk_test_cases(test_cases: Sequence[AthleteInput], num_chunks: int) -> List[List[AthleteInput]]:
    """Split into at most num_chunks contiguous chunks whose sizes differ by at most one"""
    if num_chunks < 1:
        raise ValueError(f"num_chunks must be positive, got {num_chunks}")

    num_chunks = min(num_chunks, len(test_cases))
    if num_chunks == 0:
        return []

    size, remainder = divmod(len(test_cases), num_chunks)
    chunks = []
    start = 0
    for i in range(num_chunks):
        end = start + size + (1 if i < remainder else 0)
        chunks.append(list(test_cases[start:end]))
        start = end
    return chunks


def worker_log_path(log_file: str, worker_index: int) -> str:
    root, ext = os.path.splitext(log_file)
    return f"{root}-worker-{worker_index}{ext}"


def reset_run_logs(log_file: str) -> None:
    """Truncate the base log and remove worker logs left by earlier runs"""
    ResultLog(log_file).reset()
    root, ext = os.path.splitext(log_file)
    for stale in glob.glob(f"{glob.escape(root)}-worker-*{glob.escape(ext)}"):
        os.remove(stale)


def run_worker(worker_index: int, test_cases: List[AthleteInput], config: Config,
               id_offset: int, conn) -> None:
    """Worker process entry point: run one chunk and send its summary back"""
    logging.basicConfig(level=logging.INFO)
    logger.info(f"Worker {os.getpid()} received {len(test_cases)} test cases")

    fuzzer = AthleteFuzzer(config, log_path=worker_log_path(config.run.log_file, worker_index))
    summary = asyncio.run(
        fuzzer.run(test_cases, id_offset=id_offset, title=f"Worker {worker_index} Report")
    )

    conn.send(summary)
    conn.close()


@dataclass
class ParallelOutcome:
    """Merged summary of every worker that reported back"""
    summary: RunSummary
    crashed_workers: List[int] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.crashed_workers and self.summary.failure_count == 0


class ParallelRunner:
    """Fan test cases out across worker processes"""

    def __init__(self, config: Config, workers: Optional[int] = None,
                 target: Callable = run_worker):
        self.config = config
        self.workers = workers or config.run.workers or os.cpu_count() or 1
        self.target = target

    def run(self, test_cases: Sequence[AthleteInput]) -> ParallelOutcome:
        chunks = chunk_test_cases(test_cases, self.workers)
        reset_run_logs(self.config.run.log_file)
        logger.info(f"Master {os.getpid()} is running")
        logger.info(f"Spawning {len(chunks)} workers...")

        ctx = multiprocessing.get_context()
        handles = []
        offset = 0
        for index, chunk in enumerate(chunks, 1):
            reader, writer = ctx.Pipe(duplex=False)
            process = ctx.Process(
                target=self.target,
                args=(index, chunk, self.config, offset, writer),
                name=f"athlete-worker-{index}",
            )
            process.start()
            # the child holds the only write end, so recv() sees EOF if it dies
            writer.close()
            logger.info(f"Sent {len(chunk)} test cases to worker {process.pid}")
            handles.append((index, process, reader))
            offset += len(chunk)

        summary = RunSummary.empty()
        crashed = []
        for index, process, reader in handles:
            worker_summary = None
            try:
                worker_summary = reader.recv()
            except EOFError:
                pass
            finally:
                reader.close()
            process.join()

            if worker_summary is not None:
                logger.info(f"Received result from worker {process.pid}")
                summary = summary.merge(worker_summary)

            if process.exitcode != 0 or worker_summary is None:
                crashed.append(index)
                self._log_crash(process)

        return ParallelOutcome(summary=summary, crashed_workers=crashed)

    def _log_crash(self, process):
        code = process.exitcode
        sig = None
        if code is not None and code < 0:
            try:
                sig = signal.Signals(-code).name
            except ValueError:
                sig = -code
        logger.error(f"Worker {process.pid} exited with code {code} and signal {sig}")
