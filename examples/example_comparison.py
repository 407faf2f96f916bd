# example_comparison.py
"""Examples of vendor comparison inside a procurement project."""

import pandas as pd
from vendor_scoring import ComparisonRanker, ComparisonProject, Weights, rank_vendors

# Laptop offers: price in IDR, lead time and payment terms in days, warranty in months
vendors = pd.DataFrame({
    'name': ['PT Sinar Jaya Komputer', 'CV Mitra Teknologi', 'Toko IT Cepat'],
    'price': [12_500_000, 12_000_000, 13_000_000],
    'lead_time': [14, 21, 7],
    'warranty': [24, 12, 24],
    'payment_terms': [30, 60, 15],
})

# ── Example 1: Ranker with explicit weights ──

print("=== Example 1: Explicit weights ===\n")

ranker = ComparisonRanker(Weights(price=50, lead_time=20, warranty=20, payment_terms=10))
result = ranker.evaluate(vendors)

print(result[['name', 'score_price', 'score_lead_time', 'score_warranty',
              'score_payment_terms', 'final_score', 'rank']].round(2))
print()
print(ranker.summary())
print()

# ── Example 2: Project from config ──

print("=== Example 2: Project from config ===\n")

project = ComparisonProject.from_config({
    'id': 'proj-1',
    'name': 'Pengadaan Laptop Kantor 2025',
    'weights': {'price': 80, 'leadTime': 10, 'warranty': 10, 'paymentTerms': 0},
    'vendors': vendors.assign(id=['v1', 'v2', 'v3']).to_dict('records'),
})

print(rank_vendors(project)[['name', 'final_score', 'rank']].round(2))
