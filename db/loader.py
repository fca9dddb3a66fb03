"""
Preloaded datasets served from the hosted store.

Two tables ship with the dashboard: a census table keyed by numeric state
codes and an NGO registry. Both are read through the generic filtered query
layer and returned as plain row records.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence, Tuple

from db.connection import DatabaseClient
from db.query import PageResult, StoreFilter, fetch_rows


STATE_MAPPING: Dict[int, str] = {
    1: "JAMMU & KASHMIR",
    2: "HIMACHAL PRADESH",
    3: "PUNJAB",
    4: "CHANDIGARH",
    5: "UTTARAKHAND",
    6: "HARYANA",
    7: "NCT OF DELHI",
    8: "RAJASTHAN",
    9: "UTTAR PRADESH",
    10: "BIHAR",
    11: "SIKKIM",
    12: "ARUNACHAL PRADESH",
    13: "NAGALAND",
    14: "MANIPUR",
    15: "MIZORAM",
    16: "TRIPURA",
    17: "MEGHALAYA",
    18: "ASSAM",
    19: "WEST BENGAL",
    20: "JHARKHAND",
    21: "ODISHA",
    22: "CHHATTISGARH",
    23: "MADHYA PRADESH",
    24: "GUJARAT",
    25: "DAMAN & DIU",
    26: "DADRA & NAGAR HAVELI",
    27: "MAHARASHTRA",
    28: "ANDHRA PRADESH",
    29: "KARNATAKA",
    30: "GOA",
    31: "LAKSHADWEEP",
    32: "KERALA",
    33: "TAMIL NADU",
    34: "PUDUCHERRY",
    35: "ANDAMAN & NICOBAR ISLANDS",
}


@dataclass(frozen=True)
class PreloadedDataset:
    key: str
    table: str
    label: str
    order_by: Optional[str] = None
    search_columns: Tuple[str, ...] = ()


PRELOADED_DATASETS: Dict[str, PreloadedDataset] = {
    "census": PreloadedDataset(
        key="census",
        table="Cencus_2011",
        label="Census 2011",
        order_by="Name",
        search_columns=("Name", "Level", "TRU"),
    ),
    "ngo": PreloadedDataset(
        key="ngo",
        table="Darpan_NGO",
        label="NGO Darpan",
        order_by="Name of NPO",
        search_columns=("Name of NPO", "State", "District", "Sectors working in"),
    ),
}


def get_preloaded(key: str) -> PreloadedDataset:
    try:
        return PRELOADED_DATASETS[key.lower()]
    except KeyError:
        raise ValueError(f"Unknown dataset: {key}") from None


def state_name(code: Any) -> str:
    try:
        return STATE_MAPPING[int(code)]
    except (TypeError, ValueError, KeyError):
        return f"Unknown State ({code})"


def annotate_state_names(rows: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Add a readable StateName to census rows keyed by numeric state code."""
    return [{**row, "StateName": state_name(row.get("State"))} for row in rows]


def load_dataset(
    db: DatabaseClient,
    key: str,
    filters: Sequence[StoreFilter] = (),
    search: Optional[str] = None,
    page: int = 1,
    page_size: Optional[int] = None,
) -> PageResult:
    """
    Load a filtered page of a preloaded dataset.

    Args:
        db: DatabaseClient instance
        key: "census" or "ngo"
        filters: Store predicates
        search: Optional substring searched across the dataset's text columns
        page: 1-based page number
        page_size: Rows per page; all matching rows when None

    Returns:
        PageResult; census rows carry an extra StateName column
    """
    spec = get_preloaded(key)
    result = fetch_rows(
        db,
        spec.table,
        filters=filters,
        search=search,
        search_columns=spec.search_columns,
        order_by=spec.order_by,
        page=page,
        page_size=page_size,
    )
    if spec.key == "census":
        result.rows = annotate_state_names(result.rows)
        result.columns = result.columns + ["StateName"]
    return result
