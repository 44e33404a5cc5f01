from abc import ABC, abstractmethod

import pandas as pd

from .chain import AnalysisChain
from .filters import filter_mask


class Treatment(ABC):
    """Base class for all data treatments."""

    @abstractmethod
    def apply(self, df: pd.DataFrame) -> dict:
        """Apply the treatment to the DataFrame.

        Returns a dict with the treated frame under "db" and any statistics
        gathered on the way under "metrics".
        """
        pass

    def get_cols(self):
        """Get all columns used in the treatment."""
        return []

    def get_created_cols(self):
        """Get the names of columns created by the treatment."""
        return []


class TreatmentAnalysisChain(Treatment):
    """Adds the result of an analysis chain as a new column."""

    def __init__(self, chain: AnalysisChain, result_name=None, overwrite=False):
        """Initialize the TreatmentAnalysisChain.

        Args:
            chain: The validated analysis chain to evaluate.
            result_name: Name of the created column. Defaults to the chain's
                result_name.
            overwrite: Allow replacing an existing column with the same name.
        """
        name = result_name or chain.result_name
        if not name or not str(name).strip():
            raise ValueError("Provide a name for the result column.")
        self.chain = chain
        self.result_name = str(name).strip()
        self.overwrite = overwrite

    def get_cols(self):
        """Get all columns used in the treatment."""
        return self.chain.columns

    def get_created_cols(self):
        """Get the names of columns created by the treatment."""
        return [self.result_name]

    def apply(self, df):
        """Evaluate the chain over df and store the result column on a copy."""
        if self.result_name in df.columns and not self.overwrite:
            raise ValueError(
                f"Column '{self.result_name}' already exists. Choose another name or set overwrite=True."
            )
        evaluation = self.chain.evaluate(df)
        df_copy = df.copy()
        df_copy[self.result_name] = evaluation.result.to_numpy()

        metrics = {}
        for position, diagnostics in enumerate(evaluation.diagnostics, start=1):
            for name, value in diagnostics.items():
                metrics[f"step_{position}_{name}"] = value
        scored = evaluation.result.dropna()
        metrics["scored_rows"] = int(scored.size)
        metrics["result_min"] = float(scored.min()) if not scored.empty else None
        metrics["result_max"] = float(scored.max()) if not scored.empty else None
        return {"db": df_copy, "metrics": metrics}


class TreatmentFilter(Treatment):
    """Keeps only the rows that satisfy every filter."""

    def __init__(self, filters):
        """Initialize the TreatmentFilter.

        Args:
            filters: A list of FilterDefinition objects, combined with AND.
        """
        self.filters = list(filters)

    def get_cols(self):
        """Get all columns used in the treatment."""
        return list(dict.fromkeys(f.column.key for f in self.filters))

    def apply(self, df):
        """Drop the rows failing any filter."""
        mask = filter_mask(df, self.filters)
        filtered = df[mask.to_numpy()]
        return {
            "db": filtered,
            "metrics": {"rows_before": int(len(df)), "rows_after": int(len(filtered))},
        }


def apply_treatments(df, treatments):
    """Apply treatments in order, feeding each the previous one's frame.

    Returns a dict with the final frame under "db" and the metrics of every
    treatment, keyed by position and class name, under "metrics".
    """
    metrics = {}
    for position, treatment in enumerate(treatments):
        output = treatment.apply(df)
        df = output["db"]
        metrics[f"{position}_{type(treatment).__name__}"] = output.get("metrics", {})
    return {"db": df, "metrics": metrics}
