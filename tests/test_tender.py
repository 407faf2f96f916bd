"""Tests for tender scoring and award."""

import json
import warnings

import pytest
import yaml

from vendor_scoring import (
    Bid,
    BidScore,
    ConfigurationError,
    ScoringCriterion,
    Tender,
    TenderStateError,
    TenderStatus,
    award_tender,
    calculate_weighted_score,
    change_status,
    rank_bids,
)
from vendor_scoring.ranking import NO_CANDIDATES_MESSAGE, UNSCORED_WINNER_MESSAGE


def scored_bid(bid_id, vendor_id, vendor_name, **scores):
    return Bid(
        id=bid_id,
        vendor_id=vendor_id,
        vendor_name=vendor_name,
        scores=[BidScore(criterion_id, score) for criterion_id, score in scores.items()],
    )


@pytest.fixture
def criteria():
    return [
        ScoringCriterion('c1', 'Harga', 40),
        ScoringCriterion('c2', 'Kualitas', 30),
        ScoringCriterion('c3', 'Waktu', 20),
        ScoringCriterion('c4', 'Reputasi', 10),
    ]


@pytest.fixture
def office_tender(criteria):
    """Office supplies tender with two fully scored bids."""
    return Tender(
        id='t1',
        name='Pengadaan ATK Kantor Pusat 2025',
        criteria=criteria,
        bids=[
            scored_bid('b1', 'v3', 'Sumber Bahan Baku', c1=8, c2=9, c3=7, c4=8),
            scored_bid('b2', 'v4', 'Toko Sembako Jaya', c1=9, c2=8, c3=8, c4=9),
        ],
    )


class TestWeightedScore:
    """Tests for calculate_weighted_score."""

    def test_fully_scored_bids(self, office_tender):
        b1, b2 = office_tender.bids
        # 40*0.8 + 30*0.9 + 20*0.7 + 10*0.8
        assert calculate_weighted_score(b1, office_tender.criteria) == pytest.approx(81.0)
        # 40*0.9 + 30*0.8 + 20*0.8 + 10*0.9
        assert calculate_weighted_score(b2, office_tender.criteria) == pytest.approx(85.0)

    def test_partial_scoring_uses_scored_weights_only(self):
        criteria = [ScoringCriterion('c1', 'Harga', 20), ScoringCriterion('c2', 'Kualitas', 80)]
        bid = scored_bid('b1', 'v1', 'A', c1=10)

        assert calculate_weighted_score(bid, criteria) == pytest.approx(100.0)

    def test_unscored_bid_is_zero(self, criteria):
        assert calculate_weighted_score(scored_bid('b1', 'v1', 'A'), criteria) == 0.0

    def test_zero_weight_criteria_only(self):
        criteria = [ScoringCriterion('c1', 'Harga', 0)]
        assert calculate_weighted_score(scored_bid('b1', 'v1', 'A', c1=7), criteria) == 0.0

    def test_weights_not_summing_to_100(self):
        criteria = [ScoringCriterion('c1', 'Harga', 1), ScoringCriterion('c2', 'Kualitas', 3)]
        bid = scored_bid('b1', 'v1', 'A', c1=10, c2=6)
        # (1*1.0 + 3*0.6) / 4 * 100
        assert calculate_weighted_score(bid, criteria) == pytest.approx(70.0)

    def test_unknown_criterion_ignored_with_warning(self, criteria):
        bid = scored_bid('b1', 'v1', 'A', c1=5, c9=10)

        with pytest.warns(UserWarning, match="unknown criteria"):
            score = calculate_weighted_score(bid, criteria)

        assert score == pytest.approx(50.0)

    def test_score_out_of_range_rejected(self):
        with pytest.raises(ConfigurationError):
            BidScore('c1', 11)
        with pytest.raises(ConfigurationError):
            BidScore('c1', -1)

    def test_negative_criterion_weight_rejected(self):
        with pytest.raises(ConfigurationError):
            ScoringCriterion('c1', 'Harga', -5)

    def test_duplicate_criterion_scores_rejected(self):
        """A bid holds at most one score per criterion."""
        with pytest.raises(ConfigurationError, match="more than one score"):
            Bid(id='b1', vendor_id='v1', vendor_name='A',
                scores=[BidScore('c1', 10), BidScore('c1', 0)])


class TestRankBids:
    """Tests for rank_bids."""

    def test_better_bid_ranks_first(self, office_tender):
        result = rank_bids(office_tender)

        assert list(result['bid_id']) == ['b2', 'b1']
        assert list(result['rank']) == [1, 2]
        assert result.iloc[0]['final_score'] == pytest.approx(85.0)

    def test_detail_columns_hold_raw_scores(self, office_tender):
        """score_<criterion id> is the 0-10 score the bid was given."""
        result = rank_bids(office_tender).set_index('bid_id')

        assert result.loc['b1', 'score_c1'] == 8
        assert result.loc['b1', 'score_c3'] == 7
        assert result.loc['b2', 'score_c4'] == 9

    def test_criteria_sharing_a_name_keep_separate_columns(self):
        criteria = [ScoringCriterion('c1', 'Harga', 50), ScoringCriterion('c2', 'Harga', 50)]
        tender = Tender(id='t', name='T', criteria=criteria,
                        bids=[scored_bid('b1', 'v1', 'A', c1=10, c2=0)])
        result = rank_bids(tender)

        assert result.iloc[0]['score_c1'] == 10
        assert result.iloc[0]['score_c2'] == 0
        assert result.iloc[0]['final_score'] == pytest.approx(50.0)

    def test_missing_score_is_nan(self, criteria):
        tender = Tender(id='t', name='T', criteria=criteria,
                        bids=[scored_bid('b1', 'v1', 'A', c1=10)])
        result = rank_bids(tender)

        assert result.iloc[0]['score_c2'] != result.iloc[0]['score_c2']
        assert result.iloc[0]['final_score'] == pytest.approx(100.0)

    def test_ties_keep_submission_order(self, criteria):
        tender = Tender(id='t', name='T', criteria=criteria, bids=[
            scored_bid('b1', 'v1', 'First', c1=7, c2=7),
            scored_bid('b2', 'v2', 'Second', c1=9),
            scored_bid('b3', 'v3', 'Third', c1=7, c2=7),
        ])
        result = rank_bids(tender)

        assert list(result['bid_id']) == ['b2', 'b1', 'b3']
        assert list(result['rank']) == [1, 2, 3]

    def test_single_bid_keeps_its_score(self, criteria):
        """Tender scores are absolute; one bid is not promoted to 100."""
        tender = Tender(id='t', name='T', criteria=criteria,
                        bids=[scored_bid('b1', 'v1', 'A', c1=5, c2=5, c3=5, c4=5)])
        result = rank_bids(tender)

        assert result.iloc[0]['final_score'] == pytest.approx(50.0)
        assert result.iloc[0]['rank'] == 1

    def test_no_bids(self, criteria):
        result = rank_bids(Tender(id='t', name='T', criteria=criteria))

        assert result.empty
        assert 'rank' in result.columns


class TestAward:
    """Tests for award_tender."""

    def test_award_to_top_bid(self, office_tender):
        decision = award_tender(office_tender)

        assert decision.awarded
        assert decision.winner['vendor_id'] == 'v4'
        assert decision.final_score == pytest.approx(85.0)
        assert decision.tender.status == TenderStatus.AWARDED
        assert decision.tender.winning_vendor_id == 'v4'
        assert decision.tender.winning_vendor_name == 'Toko Sembako Jaya'

    def test_award_does_not_modify_input(self, office_tender):
        award_tender(office_tender)

        assert office_tender.status == TenderStatus.OPEN
        assert office_tender.winning_vendor_id is None

    def test_award_without_bids_fails(self, criteria):
        tender = Tender(id='t', name='T', criteria=criteria)
        decision = award_tender(tender)

        assert not decision.awarded
        assert decision.message == NO_CANDIDATES_MESSAGE
        assert decision.tender is tender

    def test_award_with_unscored_bids_fails(self, criteria):
        tender = Tender(id='t', name='T', criteria=criteria, bids=[
            scored_bid('b1', 'v1', 'A'),
            scored_bid('b2', 'v2', 'B'),
        ])
        decision = award_tender(tender)

        assert not decision.awarded
        assert decision.message == UNSCORED_WINNER_MESSAGE
        assert decision.tender.status == TenderStatus.OPEN

    def test_award_zero_scores_fails(self, criteria):
        """A bid scored 0 everywhere is treated like an unscored bid."""
        tender = Tender(id='t', name='T', criteria=criteria,
                        bids=[scored_bid('b1', 'v1', 'A', c1=0, c2=0)])

        assert not award_tender(tender).awarded

    def test_award_closed_tender_raises(self, office_tender):
        closed = change_status(office_tender, 'Closed')

        with pytest.raises(TenderStateError):
            award_tender(closed)

    def test_award_twice_raises(self, office_tender):
        awarded = award_tender(office_tender).tender

        with pytest.raises(TenderStateError):
            award_tender(awarded)


class TestStatus:
    """Tests for tender status transitions."""

    def test_open_close_reopen(self, office_tender):
        closed = change_status(office_tender, TenderStatus.CLOSED)
        assert closed.status == TenderStatus.CLOSED
        assert change_status(closed, 'Open').status == TenderStatus.OPEN

    def test_awarded_is_terminal(self, office_tender):
        awarded = award_tender(office_tender).tender

        with pytest.raises(TenderStateError):
            change_status(awarded, 'Open')

    def test_cannot_set_awarded_directly(self, office_tender):
        with pytest.raises(TenderStateError):
            change_status(office_tender, 'Awarded')

    def test_unknown_status(self, office_tender):
        with pytest.raises(ConfigurationError):
            change_status(office_tender, 'Pending')

    def test_string_status_is_parsed(self, criteria):
        tender = Tender(id='t', name='T', criteria=criteria, status='Closed')
        assert tender.status is TenderStatus.CLOSED


class TestTenderConfig:
    """Tests for config-based creation."""

    @pytest.fixture
    def config(self):
        return {
            'id': 't1',
            'name': 'Pengadaan ATK Kantor Pusat 2025',
            'status': 'Open',
            'openDate': '2024-08-01',
            'closeDate': '2024-08-30',
            'criteria': [
                {'id': 'c1', 'name': 'Harga', 'weight': 40},
                {'id': 'c2', 'name': 'Kualitas Produk', 'weight': 30},
                {'id': 'c3', 'name': 'Waktu Pengiriman', 'weight': 20},
                {'id': 'c4', 'name': 'Reputasi Vendor', 'weight': 10},
            ],
            'bids': [
                {'id': 'b1', 'tenderId': 't1', 'vendorId': 'v3',
                 'vendorName': 'Sumber Bahan Baku', 'price': 45000000,
                 'details': [{'criterionId': 'c3', 'value': '7 hari kerja'}],
                 'scores': [{'criterionId': 'c1', 'score': 8}, {'criterionId': 'c2', 'score': 9},
                            {'criterionId': 'c3', 'score': 7}, {'criterionId': 'c4', 'score': 8}]},
                {'id': 'b2', 'tenderId': 't1', 'vendorId': 'v4',
                 'vendorName': 'Toko Sembako Jaya', 'price': 42500000,
                 'scores': [{'criterionId': 'c1', 'score': 9}, {'criterionId': 'c2', 'score': 8},
                            {'criterionId': 'c3', 'score': 8}, {'criterionId': 'c4', 'score': 9}]},
            ],
        }

    def test_from_config(self, config):
        tender = Tender.from_config(config)

        assert tender.open_date == '2024-08-01'
        assert tender.total_weight == 100
        assert tender.criterion('c2').name == 'Kualitas Produk'
        assert tender.bids[0].details[0].value == '7 hari kerja'
        assert rank_bids(tender).iloc[0]['vendor_id'] == 'v4'

    def test_from_yaml(self, config, tmp_path):
        path = tmp_path / 'tender.yaml'
        path.write_text(yaml.dump(config))

        assert award_tender(Tender.from_yaml(str(path))).winner['vendor_name'] == 'Toko Sembako Jaya'

    def test_from_json(self, config, tmp_path):
        config['status'] = 'Closed'
        path = tmp_path / 'tender.json'
        path.write_text(json.dumps(config))

        assert Tender.from_json(str(path)).status == TenderStatus.CLOSED

    def test_invalid_score_in_config(self, config):
        config['bids'][0]['scores'][0]['score'] = 15

        with pytest.raises(ConfigurationError):
            Tender.from_config(config)

    def test_no_warning_for_known_criteria(self, config):
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            rank_bids(Tender.from_config(config))
