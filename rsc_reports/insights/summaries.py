"""Roll-ups over the object inventory.

All functions take flat records (as returned by the ``objects`` and
``clusters`` reports) and return flat records, so their output goes
through the same table/CSV/JSON writers as any other report.
"""

from __future__ import annotations

from collections import Counter, OrderedDict
from typing import Any, Dict, Iterable, List, Optional, Tuple

from ..data.models import ComplianceStatus
from ..data.normalization import format_percent, is_unprotected_sla, percent

UNKNOWN = "Unknown"


def group_count(records: Iterable[Dict[str, Any]], key: str) -> List[Dict[str, Any]]:
    """Count records per value of ``key``, largest group first."""
    counts = Counter(r.get(key) or UNKNOWN for r in records)
    return [{key: value, "count": n} for value, n in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))]


def protection_summary(objects: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Protected vs unprotected objects per object type."""
    groups: Dict[str, Dict[str, int]] = {}
    for record in objects:
        g = groups.setdefault(
            record.get("object_type") or UNKNOWN,
            {"total": 0, "protected": 0, "unprotected": 0, "do_not_protect": 0, "relics": 0},
        )
        g["total"] += 1
        label = record.get("protection")
        if label == "DoNotProtect":
            g["do_not_protect"] += 1
        elif label == "Protected" or (label is None and not is_unprotected_sla(record.get("sla_domain_id"))):
            g["protected"] += 1
        else:
            g["unprotected"] += 1
        if record.get("is_relic"):
            g["relics"] += 1

    rows = []
    for object_type in sorted(groups):
        g = groups[object_type]
        rows.append(
            {
                "object_type": object_type,
                **g,
                "protected_percent": percent(g["protected"], g["total"]),
                "protected_rate": format_percent(g["protected"], g["total"]),
            }
        )
    return rows


def cluster_sla_summary(objects: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Compliance per (cluster, SLA domain) for objects with an SLA."""
    groups: Dict[Tuple[str, str], Dict[str, int]] = OrderedDict()
    for record in objects:
        if is_unprotected_sla(record.get("sla_domain_id")):
            continue
        key = (record.get("cluster") or UNKNOWN, record.get("sla_domain") or UNKNOWN)
        g = groups.setdefault(key, {"objects": 0, "in_compliance": 0, "out_of_compliance": 0})
        g["objects"] += 1
        status = (record.get("compliance_status") or "").upper()
        if status == ComplianceStatus.IN_COMPLIANCE:
            g["in_compliance"] += 1
        elif status == ComplianceStatus.OUT_OF_COMPLIANCE:
            g["out_of_compliance"] += 1

    rows = []
    for (cluster, sla), g in sorted(groups.items()):
        rows.append(
            {
                "cluster": cluster,
                "sla_domain": sla,
                **g,
                "compliance_percent": percent(g["in_compliance"], g["objects"]),
                "compliance_rate": format_percent(g["in_compliance"], g["objects"]),
            }
        )
    return rows


def _sum(values: Iterable[Optional[float]]) -> float:
    return round(sum(v for v in values if v is not None), 2)


def storage_by_cluster(objects: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Summed local, archive and replica storage (GB) per cluster."""
    groups: Dict[str, List[Dict[str, Any]]] = {}
    for record in objects:
        groups.setdefault(record.get("cluster") or UNKNOWN, []).append(record)

    rows = []
    for cluster in sorted(groups):
        items = groups[cluster]
        rows.append(
            {
                "cluster": cluster,
                "objects": len(items),
                "local_storage_gb": _sum(r.get("local_storage_gb") for r in items),
                "archive_storage_gb": _sum(r.get("archive_storage_gb") for r in items),
                "replica_storage_gb": _sum(r.get("replica_storage_gb") for r in items),
                "logical_gb": _sum(r.get("logical_gb") for r in items),
            }
        )
    return rows


def cluster_summary(clusters: Iterable[Dict[str, Any]], objects: Iterable[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """Cluster records joined with object counts and local storage.

    Objects are matched on ``cluster_id``, falling back to the cluster name.
    """
    by_id: Dict[str, List[Dict[str, Any]]] = {}
    by_name: Dict[str, List[Dict[str, Any]]] = {}
    for record in objects:
        if record.get("cluster_id"):
            by_id.setdefault(record["cluster_id"], []).append(record)
        elif record.get("cluster"):
            by_name.setdefault(record["cluster"], []).append(record)

    rows = []
    for cluster in clusters:
        items = by_id.get(cluster.get("cluster_id"), []) + by_name.get(cluster.get("cluster"), [])
        protected = sum(1 for r in items if not is_unprotected_sla(r.get("sla_domain_id")))
        rows.append(
            {
                **cluster,
                "objects": len(items),
                "protected_objects": protected,
                "local_storage_gb": _sum(r.get("local_storage_gb") for r in items),
            }
        )
    return rows
