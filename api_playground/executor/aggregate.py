"""Hash aggregation over flattened rows."""

from typing import Any, Dict, List, Mapping, Sequence, Tuple

from ..plan.query import AggregateFunction, ProjectionItem, STAR_ARGUMENT


class HashAggregator:
    """Groups rows and evaluates aggregate projection items.

    Groups are emitted in the order their first row appears. Without
    GROUP BY columns all rows form a single group, so an aggregate-only
    query always yields exactly one row.
    """

    def __init__(self, items: Sequence[ProjectionItem], group_by: Sequence[str]):
        """Initialize aggregator.

        Args:
            items: Projection items, aggregate and plain
            group_by: Grouping column names
        """
        self.items = list(items)
        self.group_by = list(group_by)

    def aggregate(self, rows: Sequence[Mapping[str, Any]]) -> List[Dict[str, Any]]:
        """Aggregate rows into one output row per group."""
        groups = self._build_groups(rows)
        if not groups and not self.group_by:
            groups[()] = self._new_group(None)

        results = []
        for group in groups.values():
            results.append(self._finalize_group(group))
        return results

    def _build_groups(self, rows: Sequence[Mapping[str, Any]]) -> Dict[Tuple, dict]:
        groups: Dict[Tuple, dict] = {}
        for row in rows:
            key = self._extract_group_key(row)
            group = groups.get(key)
            if group is None:
                group = self._new_group(row)
                groups[key] = group
            self._accumulate_row(group, row)
        return groups

    def _extract_group_key(self, row: Mapping[str, Any]) -> Tuple:
        key_values = []
        for column in self.group_by:
            key_values.append(row.get(column))
        return tuple(key_values)

    def _new_group(self, first_row) -> dict:
        accumulators = []
        for item in self.items:
            accumulators.append(self._create_accumulator(item))
        return {"first_row": first_row, "accumulators": accumulators}

    def _create_accumulator(self, item: ProjectionItem) -> dict:
        if item.is_aggregate:
            return {"type": item.function, "count": 0, "sum": 0, "min": None, "max": None}
        return {"type": None}

    def _accumulate_row(self, group: dict, row: Mapping[str, Any]) -> None:
        index = 0
        while index < len(self.items):
            item = self.items[index]
            if item.is_aggregate:
                self._update_accumulator(group["accumulators"][index], item, row)
            index += 1

    def _update_accumulator(self, acc: dict, item: ProjectionItem, row: Mapping[str, Any]) -> None:
        if item.function == AggregateFunction.COUNT:
            if item.argument == STAR_ARGUMENT or row.get(item.argument) is not None:
                acc["count"] += 1
            return

        value = row.get(item.argument)
        if not _is_number(value):
            return
        acc["count"] += 1
        acc["sum"] += value
        if acc["min"] is None or value < acc["min"]:
            acc["min"] = value
        if acc["max"] is None or value > acc["max"]:
            acc["max"] = value

    def _finalize_group(self, group: dict) -> Dict[str, Any]:
        output: Dict[str, Any] = {}
        first_row = group["first_row"]
        index = 0
        while index < len(self.items):
            item = self.items[index]
            if item.is_aggregate:
                output[item.output_name] = self._finalize_accumulator(
                    group["accumulators"][index]
                )
            elif first_row is not None:
                key = item.column if item.column else item.text
                if key in first_row:
                    output[item.output_name] = first_row[key]
            index += 1
        return output

    def _finalize_accumulator(self, acc: dict) -> Any:
        acc_type = acc["type"]
        if acc_type == AggregateFunction.COUNT:
            return acc["count"]
        if acc_type == AggregateFunction.SUM:
            return acc["sum"]
        if acc_type == AggregateFunction.AVG:
            return acc["sum"] / acc["count"] if acc["count"] > 0 else None
        if acc_type == AggregateFunction.MIN:
            return acc["min"]
        if acc_type == AggregateFunction.MAX:
            return acc["max"]
        return None


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)
