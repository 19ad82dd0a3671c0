"""
Phase Logging for the N-gram Analyzer
=====================================

Provides colored, structured logging with phase tracking for the counting
pipeline (tokenize -> aggregate -> filter -> rank -> merge -> report).
IMPORTANT: No emojis in console output (Windows encoding issues).
"""

import logging
import time
from typing import Optional, Dict
from contextlib import contextmanager
from datetime import datetime
from colorama import Fore, Style, init

# Initialize colorama for Windows
init(autoreset=True)

# Phase definitions
class Phase:
    """Phase constants for the n-gram pipeline"""
    TOKENIZE = "TOKENIZE"
    AGGREGATE = "AGGREGATE"
    FILTER = "FILTER"
    RANK = "RANK"
    MERGE = "MERGE"
    REPORT = "REPORT"

# Phase colors
PHASE_COLORS = {
    Phase.TOKENIZE: Fore.CYAN,
    Phase.AGGREGATE: Fore.GREEN,
    Phase.FILTER: Fore.YELLOW,
    Phase.RANK: Fore.BLUE,
    Phase.MERGE: Fore.MAGENTA,
    Phase.REPORT: Fore.GREEN + Style.BRIGHT,
}

# Phase icons (text-based, no emojis for Windows)
PHASE_ICONS = {
    Phase.TOKENIZE: "[TOK]",
    Phase.AGGREGATE: "[AGG]",
    Phase.FILTER: "[FLT]",
    Phase.RANK: "[RNK]",
    Phase.MERGE: "[MRG]",
    Phase.REPORT: "[OK ]",
}


class TimingTracker:
    """Accumulate elapsed time per key (a phase can run once per n-gram size)"""

    def __init__(self):
        self._timings: Dict[str, float] = {}
        self._start_times: Dict[str, float] = {}

    def start(self, key: str):
        """Start timing for a key"""
        self._start_times[key] = time.perf_counter()

    def end(self, key: str) -> float:
        """End timing, add to the key's total and return this run's elapsed seconds"""
        if key not in self._start_times:
            return 0.0
        elapsed = time.perf_counter() - self._start_times.pop(key)
        self._timings[key] = self._timings.get(key, 0.0) + elapsed
        return elapsed

    def get(self, key: str) -> Optional[float]:
        return self._timings.get(key)

    def get_all(self) -> Dict[str, float]:
        return self._timings.copy()


class PhaseLogger:
    """
    Logger with phase tracking and visual formatting

    Usage:
        phase_logger = PhaseLogger(run_id="cli", verbose=True)

        with phase_logger.phase(Phase.FILTER, sub_label="n=2"):
            phase_logger.log_filter_counts(2, before=120, after=14)
    """

    def __init__(
        self,
        run_id: str,
        verbose: bool = False,
        extra_verbose: bool = False,
        logger: Optional[logging.Logger] = None
    ):
        self.run_id = run_id
        self.verbose = verbose or extra_verbose
        self.extra_verbose = extra_verbose
        self.logger = logger or logging.getLogger(__name__)
        self.timing_tracker = TimingTracker()
        self._current_phase: Optional[str] = None
        self._phase_stack = []

    @contextmanager
    def phase(self, phase_name: str, sub_label: Optional[str] = None):
        """Context manager for phase tracking with automatic timing"""
        self._enter_phase(phase_name, sub_label)
        try:
            yield self
        finally:
            self._exit_phase(phase_name)

    def _enter_phase(self, phase_name: str, sub_label: Optional[str] = None):
        self._phase_stack.append(self._current_phase)
        self._current_phase = phase_name
        self.timing_tracker.start(phase_name)
        if self.verbose:
            self._print_phase_header(phase_name, sub_label)

    def _exit_phase(self, phase_name: str):
        elapsed = self.timing_tracker.end(phase_name)
        if self.extra_verbose:
            self._print_phase_footer(phase_name, elapsed)
        self._current_phase = self._phase_stack.pop() if self._phase_stack else None

    def _print_phase_header(self, phase_name: str, sub_label: Optional[str] = None):
        color = PHASE_COLORS.get(phase_name, Fore.WHITE)
        icon = PHASE_ICONS.get(phase_name, "[???]")
        timestamp = datetime.now().strftime("%H:%M:%S")
        sub_str = f" - {sub_label}" if sub_label else ""
        self.logger.info(
            f"{color}{icon} {phase_name}{sub_str} [{self.run_id} {timestamp}]{Style.RESET_ALL}"
        )

    def _print_phase_footer(self, phase_name: str, elapsed: float):
        color = PHASE_COLORS.get(phase_name, Fore.WHITE)
        icon = PHASE_ICONS.get(phase_name, "[???]")
        self.logger.info(f"{color}{icon} {phase_name} done in {elapsed * 1000:.1f}ms{Style.RESET_ALL}")

    def info(self, message: str):
        """Log info message with current phase context (only if verbose)"""
        if not self.verbose:
            return
        if self._current_phase:
            color = PHASE_COLORS.get(self._current_phase, Fore.WHITE)
            icon = PHASE_ICONS.get(self._current_phase, "[???]")
            self.logger.info(f"{color}{icon}{Style.RESET_ALL} {message}")
        else:
            self.logger.info(message)

    def debug(self, message: str):
        """Log debug message (only if extra verbose)"""
        if self.extra_verbose:
            self.logger.debug(f"{Fore.WHITE}{Style.DIM}{message}{Style.RESET_ALL}")

    def log_input_counters(self, chars: int, lines: int, words: int):
        self.info(f"Input: {chars} chars, {lines} lines, {words} words")

    def log_population(self, n: int, unique: int, positions: int):
        self.info(f"n={n}: {unique} unique n-grams over {positions} positions")

    def log_filter_counts(self, n: int, before: int, after: int):
        dropped = before - after
        color = Fore.GREEN if dropped == 0 else Fore.YELLOW
        self.info(f"n={n}: {color}{after}/{before} kept{Style.RESET_ALL} ({dropped} filtered out)")

    def log_timing_summary(self):
        """Log timing summary for all phases (only if extra_verbose)"""
        if not self.extra_verbose:
            return

        timings = self.timing_tracker.get_all()
        if not timings:
            return

        separator = "=" * 40
        self.logger.info(f"{Fore.WHITE}{Style.BRIGHT}{separator}{Style.RESET_ALL}")
        self.logger.info(f"{Fore.WHITE}{Style.BRIGHT}TIMING SUMMARY ({self.run_id}){Style.RESET_ALL}")
        total_time = 0.0
        for phase_name, elapsed in timings.items():
            color = PHASE_COLORS.get(phase_name, Fore.WHITE)
            self.logger.info(f"{color}{phase_name:12s} {elapsed * 1000:10.1f}ms{Style.RESET_ALL}")
            total_time += elapsed
        self.logger.info(f"{Fore.WHITE}{Style.BRIGHT}TOTAL TIME: {total_time * 1000:.1f}ms{Style.RESET_ALL}")
        self.logger.info(f"{Fore.WHITE}{Style.BRIGHT}{separator}{Style.RESET_ALL}")


# Convenience functions
def create_phase_logger(
    run_id: str,
    verbose: bool = False,
    extra_verbose: bool = False
) -> PhaseLogger:
    """Create a new PhaseLogger instance"""
    return PhaseLogger(
        run_id=run_id,
        verbose=verbose,
        extra_verbose=extra_verbose
    )
