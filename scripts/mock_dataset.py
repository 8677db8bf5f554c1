import json
from pathlib import Path

import numpy as np

rng = np.random.default_rng(0)
n_rows = 200

regions = ["North", "South", "East", "West"]
products = ["A", "B", "C", "D", "E"]
months = [f"2024-{m:02d}-01" for m in range(1, 13)]

rows = []
for _ in range(n_rows):
    units = int(rng.integers(1, 20))
    rows.append(
        {
            "Region": str(rng.choice(regions)),
            "Product": str(rng.choice(products)),
            "Month": str(rng.choice(months)),
            "Sales": round(float(units * rng.uniform(8.0, 12.0)), 2),
            "Units": units,
        }
    )

payload = {
    "fields": [
        {"name": "Region", "type": "string"},
        {"name": "Product", "type": "string"},
        {"name": "Month", "type": "date"},
        {"name": "Sales", "type": "number"},
        {"name": "Units", "type": "number"},
    ],
    "data": rows,
}

Path("data").mkdir(exist_ok=True)
Path("data/demo_sales.json").write_text(json.dumps(payload, indent=2))
print("wrote data/demo_sales.json", len(rows))
