"""Study table compiler: joins every source stage on FIPS."""

from src.study_table.builder import (
    check_unique_keys,
    join_and_reduce,
    compile_study_table,
    attach_region,
    run_stages,
    build_study_table,
)

__all__ = [
    "check_unique_keys",
    "join_and_reduce",
    "compile_study_table",
    "attach_region",
    "run_stages",
    "build_study_table",
]
