"""
Tests for the multi-level referral commission walk.

Covers:
- Chains shorter than, equal to and longer than 10 levels
- The A -> B -> C registration scenario
- Cycle and missing-ancestor termination
- Silent stop on store errors
- Ledger total versus count-based estimate
"""

from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError

from bonus.commission import ReferralCommissionHelper
from extensions import db
from models import User, ReferralBonus

EXPECTED = [Decimal(x) for x in ["25", "15", "10", "8", "6", "5", "4", "3", "2", "1"]]


def make_user(phone, code, refer_code="ROOT", wallet="0"):
    user = User(phone=phone, personal_refer_code=code, refer_code=refer_code, wallet=Decimal(wallet))
    user.set_password("secret123")
    db.session.add(user)
    db.session.commit()
    return user


class TestChainCredits:

    def test_chain_shorter_than_max_credits_every_ancestor(self, register_chain, register, wallet_of):
        codes = register_chain(4)
        phones = [str(9100000000 + i) for i in range(4)]
        before = {phone: wallet_of(phone) for phone in phones}

        response = register("9200000000", codes[-1])

        assert response.status_code == 201
        assert response.get_json()["commissionsPaid"] == 4
        # immediate referrer is the last account of the chain
        for depth, phone in enumerate(reversed(phones)):
            assert wallet_of(phone) - before[phone] == EXPECTED[depth]

    def test_ancestors_beyond_ten_levels_receive_nothing(self, register_chain, register, wallet_of):
        codes = register_chain(12)
        phones = [str(9100000000 + i) for i in range(12)]
        before = {phone: wallet_of(phone) for phone in phones}

        response = register("9200000000", codes[-1])

        assert response.get_json()["commissionsPaid"] == 10
        deltas = [wallet_of(phone) - before[phone] for phone in reversed(phones)]
        assert deltas[:10] == EXPECTED
        assert deltas[10:] == [Decimal("0"), Decimal("0")]

    def test_unmatched_referral_code_pays_nobody(self, register, wallet_of):
        register("9100000000")

        response = register("9100000001", "NOSUCHCODE")

        assert response.status_code == 201
        assert response.get_json()["commissionsPaid"] == 0
        assert wallet_of("9100000000") == Decimal("0")

    def test_scenario_a_b_c(self, register, client, wallet_of, auth_headers, signed_callback):
        code_a = register("9100000001", "ROOT").get_json()["personalReferCode"]
        code_b = register("9100000002", code_a).get_json()["personalReferCode"]
        assert wallet_of("9100000001") == Decimal("25")

        register("9100000003", code_b)
        assert wallet_of("9100000002") == Decimal("25")
        assert wallet_of("9100000001") == Decimal("40")

        # C's later payment credits C only
        order = client.post("/pay", headers=auth_headers("9100000003")).get_json()
        client.post("/callback", json=signed_callback(
            STATUS="TXN_SUCCESS", TXNID="T1", ORDERID=order["ORDER_ID"], CUST_ID="9100000003"
        ))

        assert wallet_of("9100000003") == Decimal("100")
        assert wallet_of("9100000002") == Decimal("25")
        assert wallet_of("9100000001") == Decimal("40")

    def test_ledger_rows_written_per_credit(self, app, register_chain, register):
        codes = register_chain(3)
        register("9200000000", codes[-1])

        with app.app_context():
            new_member = User.query.filter_by(phone="9200000000").first()
            rows = ReferralBonus.query.filter_by(referred_id=new_member.id).order_by(ReferralBonus.level).all()

            assert [row.level for row in rows] == [1, 2, 3]
            assert [row.user.phone for row in rows] == ["9100000002", "9100000001", "9100000000"]
            assert [Decimal(str(row.amount)) for row in rows] == EXPECTED[:3]


class TestWalkTermination:

    def test_cycle_stops_the_walk(self, app_ctx):
        make_user("9100000001", "GOALUXAAAAAA", refer_code="GOALUXBBBBBB")
        make_user("9100000002", "GOALUXBBBBBB", refer_code="GOALUXAAAAAA")

        credits = ReferralCommissionHelper.distribute("GOALUXAAAAAA")

        assert [c["phone"] for c in credits] == ["9100000001", "9100000002"]
        assert User.query.filter_by(phone="9100000001").first().wallet == Decimal("25")
        assert User.query.filter_by(phone="9100000002").first().wallet == Decimal("15")

    def test_self_referencing_code_credits_once(self, app_ctx):
        make_user("9100000001", "GOALUXSELF01", refer_code="GOALUXSELF01")

        credits = ReferralCommissionHelper.distribute("GOALUXSELF01")

        assert len(credits) == 1

    def test_new_member_in_chain_is_never_credited(self, app_ctx):
        newcomer = make_user("9100000009", "GOALUXNEW001", refer_code="GOALUXOLD001")
        make_user("9100000001", "GOALUXOLD001", refer_code="GOALUXNEW001")

        credits = ReferralCommissionHelper.distribute("GOALUXOLD001", referred_user=newcomer)

        assert [c["phone"] for c in credits] == ["9100000001"]

    def test_unknown_code_returns_no_credits(self, app_ctx):
        assert ReferralCommissionHelper.distribute("GOALUXNOPE00") == []
        assert ReferralCommissionHelper.distribute("") == []

    def test_store_error_stops_silently(self, app_ctx, monkeypatch):
        make_user("9100000001", "GOALUXROOT01")
        make_user("9100000002", "GOALUXCHILD1", refer_code="GOALUXROOT01")

        original = ReferralCommissionHelper.find_by_code
        calls = []

        def flaky_find(code):
            calls.append(code)
            if len(calls) > 1:
                raise SQLAlchemyError("connection lost")
            return original(code)

        monkeypatch.setattr(ReferralCommissionHelper, "find_by_code", staticmethod(flaky_find))

        credits = ReferralCommissionHelper.distribute("GOALUXCHILD1")

        assert len(credits) == 1
        assert User.query.filter_by(phone="9100000002").first().wallet == Decimal("25")
        assert User.query.filter_by(phone="9100000001").first().wallet == Decimal("0")

    def test_start_level_offsets_rates(self, app_ctx):
        make_user("9100000001", "GOALUXROOT01")

        credits = ReferralCommissionHelper.distribute("GOALUXROOT01", start_level=10)

        assert credits[0]["amount"] == Decimal("1.00")
        assert ReferralCommissionHelper.distribute("GOALUXROOT01", start_level=11) == []


class TestReadSide:

    def test_get_upline_is_bounded(self, app, register_chain):
        register_chain(13)

        with app.app_context():
            bottom = User.query.filter_by(phone="9100000012").first()
            upline = ReferralCommissionHelper.get_upline(bottom)

            assert len(upline) == 10
            assert upline[0].phone == "9100000011"
            assert upline[-1].phone == "9100000002"

    def test_estimate_counts_direct_referrals(self, app, register):
        code = register("9100000000").get_json()["personalReferCode"]
        for i in range(1, 4):
            register(str(9100000000 + i), code)

        with app.app_context():
            user = User.query.filter_by(phone="9100000000").first()
            # three direct referrals -> first three rates
            assert ReferralCommissionHelper.estimate_commission(user) == Decimal("50")
            # every signup paid this account as immediate referrer
            assert ReferralCommissionHelper.ledger_total(user) == Decimal("75")

    def test_estimate_caps_at_ten_referrals(self, app, register):
        code = register("9100000000").get_json()["personalReferCode"]
        for i in range(1, 13):
            register(str(9100000000 + i), code)

        with app.app_context():
            user = User.query.filter_by(phone="9100000000").first()
            assert ReferralCommissionHelper.estimate_commission(user) == Decimal("79")

    def test_no_referrals_estimate_zero(self, app_ctx):
        user = make_user("9100000001", "GOALUXROOT01")

        assert ReferralCommissionHelper.estimate_commission(user) == Decimal("0")
        assert ReferralCommissionHelper.ledger_total(user) == Decimal("0")
