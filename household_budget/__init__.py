"""Top-level package for the Household Budget dashboard.

The primary modules are:

* ``data_processing``: parsing of the spreadsheet tables into typed records
* ``aggregation`` / ``budgets`` / ``reports``: weekly budget analytics
* ``service``: report requests and transaction log edits against a store
* ``visualization``: functions that generate Plotly figures
* ``dashboard``: a Streamlit app that ties everything together

To run the dashboard from the command line you can execute:

```bash
streamlit run household_budget/dashboard.py
```
"""

from . import data_processing  # noqa: F401  # re-exported for convenience
from . import reports  # noqa: F401  # re-exported for convenience
from . import service  # noqa: F401  # re-exported for convenience

__all__ = ["data_processing", "reports", "service"]
