# example_tender.py
"""Examples of tender scoring and award."""

from vendor_scoring import ProcurementStore, ScoringCriterion

store = ProcurementStore()

tender = store.add_tender('Pengadaan ATK Kantor Pusat 2025', [
    ScoringCriterion('c1', 'Harga', 40),
    ScoringCriterion('c2', 'Kualitas Produk', 30),
    ScoringCriterion('c3', 'Waktu Pengiriman', 20),
    ScoringCriterion('c4', 'Reputasi Vendor', 10),
])

b1 = store.add_bid(tender.id, 'v3', 'Sumber Bahan Baku', price=45_000_000)
b2 = store.add_bid(tender.id, 'v4', 'Toko Sembako Jaya', price=42_500_000)

# ── Award before scoring is refused ──

print("=== Award before scoring ===\n")
print(store.award(tender.id).message)
print()

# ── Scores from the evaluation committee (or an AI reviewer) ──

store.update_bid_scores(tender.id, b1.id, [
    {'criterionId': 'c1', 'score': 8}, {'criterionId': 'c2', 'score': 9},
    {'criterionId': 'c3', 'score': 7}, {'criterionId': 'c4', 'score': 8},
])
# Reputation not scored yet: only the scored criteria count
store.update_bid_scores(tender.id, b2.id, [
    {'criterionId': 'c1', 'score': 9}, {'criterionId': 'c2', 'score': 8},
    {'criterionId': 'c3', 'score': 8},
])

print("=== Ranked bids ===\n")
print(store.ranked_bids(tender.id).round(2))
print()

decision = store.award(tender.id)
print(decision.message)
print(store.get_tender(tender.id).status.value)
