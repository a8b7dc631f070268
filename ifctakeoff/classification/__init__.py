from ifctakeoff.classification.type_resolver import (
    Candidate,
    collect_candidates,
    resolve_type_name,
)

__all__ = ["Candidate", "collect_candidates", "resolve_type_name"]
