from decimal import Decimal
from typing import List, Dict, Optional
from flask import current_app
from sqlalchemy import func
from sqlalchemy.exc import SQLAlchemyError
from extensions import db
from models import User, ReferralBonus
from bonus.config import CommissionConfig
import traceback


class ReferralCommissionHelper:
    """
    Up-to-10-level referral commission walk.
    Upline links are followed through the stored referral codes
    (User.refer_code -> User.personal_refer_code), which the store does not
    keep consistent, so every walk carries a depth limit and a visited set.
    """

    @staticmethod
    def find_by_code(referral_code: Optional[str]) -> Optional[User]:
        if not referral_code:
            return None
        return User.query.filter_by(personal_refer_code=referral_code).first()

    @staticmethod
    def get_upline(user: User, max_levels: int = CommissionConfig.MAX_LEVEL) -> List[User]:
        """
        Return the referral chain above `user`, immediate referrer first.
        """
        chain = []
        visited = {user.id}
        current = ReferralCommissionHelper.find_by_code(user.refer_code)

        while current is not None and len(chain) < max_levels:
            if current.id in visited:
                current_app.logger.warning(
                    f"Referral cycle detected at {current.personal_refer_code} above {user.phone}"
                )
                break
            visited.add(current.id)
            chain.append(current)
            current = ReferralCommissionHelper.find_by_code(current.refer_code)

        return chain

    @staticmethod
    def distribute(referral_code: str, referred_user: Optional[User] = None,
                   start_level: int = 1) -> List[Dict]:
        """
        Credit the account owning `referral_code` at `start_level`, then each
        ancestor above it at the following levels, until MAX_LEVEL is passed,
        the chain ends, or a code resolves to an account already credited.

        Each credit is committed on its own. A failed lookup or write ends the
        walk without raising; credits already committed stay in place.
        """
        credits = []
        visited = set()
        if referred_user is not None and referred_user.id is not None:
            visited.add(referred_user.id)
        level = start_level

        try:
            current = ReferralCommissionHelper.find_by_code(referral_code)

            while current is not None and level <= CommissionConfig.MAX_LEVEL:
                if current.id in visited:
                    current_app.logger.warning(
                        f"Referral cycle detected at {current.personal_refer_code}, stopping at level {level}"
                    )
                    break
                visited.add(current.id)

                rate = CommissionConfig.get_rate(level)
                amount = CommissionConfig.get_commission_amount(level)

                current.wallet = Decimal(str(current.wallet or 0)) + amount
                db.session.add(ReferralBonus(
                    user_id=current.id,
                    referred_id=referred_user.id if referred_user is not None else None,
                    level=level,
                    bonus_percentage=rate,
                    amount=amount,
                ))
                db.session.commit()

                current_app.logger.info(
                    f"Level {level} commission: {current.phone} +{amount} (rate {rate})"
                )
                credits.append({
                    "phone": current.phone,
                    "level": level,
                    "rate": rate,
                    "amount": amount,
                })

                current = ReferralCommissionHelper.find_by_code(current.refer_code)
                level += 1

        except SQLAlchemyError:
            db.session.rollback()
            current_app.logger.error(
                f"Commission walk for {referral_code} stopped at level {level}:\n" + traceback.format_exc()
            )

        return credits

    @staticmethod
    def estimate_commission(user: User) -> Decimal:
        """
        Count-based estimate: the first min(len(referrals), MAX_LEVEL) rates
        applied to the flat fee. Not a replay of the ledger.
        """
        count = min(len(user.referrals), CommissionConfig.MAX_LEVEL)
        total = Decimal('0')
        for level in range(1, count + 1):
            total += CommissionConfig.get_commission_amount(level)
        return total

    @staticmethod
    def ledger_total(user: User) -> Decimal:
        """Sum of every commission actually credited to `user`."""
        total = db.session.query(func.sum(ReferralBonus.amount)).filter(
            ReferralBonus.user_id == user.id
        ).scalar()
        return Decimal(str(total or 0))
