from .audits import (
    audit_security, audit_performance, audit_seo, audit_accessibility, run_full_scan,
)
from .fetcher import PageFetcher, FetchResult, get_fetcher
from .signals import SignalSource, SimulatedSignalSource, FixedSignalSource, get_signal_source
from .score_calculator import calculate_overall_score, generate_summary
