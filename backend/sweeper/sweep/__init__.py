# sweeper/sweep/__init__.py
"""
Abuse sweep pipeline.

Usage:
    from sweeper.sweep import ScanOrchestrator

    orchestrator = ScanOrchestrator.from_config(config)
    result = orchestrator.run_scan()

Architecture:
    ScanOrchestrator
    ├── InstanceEnumerator   — active instances from the control plane
    ├── DirectoryWalker      — depth-first walk via the node agent
    │   ├── classify()       — script / miner / undersized server.jar rules
    │   └── SuspensionActuator — suspend call per detection
    └── LogSink              — timestamped scan log, snapshot + push feed
"""

from sweeper.sweep.orchestrator import ScanOrchestrator

__all__ = ["ScanOrchestrator"]
