"""
Assessor Module Entry Point

Allows execution via: python -m apps.assessor

Delegates to scheduler for all execution modes (RUN_ONCE and scheduled).
"""

from apps.assessor.scheduler import run

if __name__ == "__main__":
    run()
