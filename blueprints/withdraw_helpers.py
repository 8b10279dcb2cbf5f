from decimal import Decimal
from datetime import datetime, timezone
import logging
from models import db, User, Withdrawal, WithdrawalStatus
from errors import BusinessRuleError, NotFoundError, ValidationError


logger = logging.getLogger(__name__)

# ==========================================================
#                  CONFIGURATION
# ==========================================================
class WithdrawalConfig:
    MIN_WALLET_BALANCE = Decimal("100")

# ==========================================================
#                  EXCEPTIONS
# ==========================================================
class WithdrawalException(BusinessRuleError):
    """Base withdrawal exception"""
    pass

class InsufficientBalanceError(WithdrawalException):
    pass

class UnpaidAccountError(WithdrawalException):
    pass

class InvalidTransitionError(WithdrawalException):
    pass

# ==========================================================
#                  WITHDRAWAL VALIDATOR
# ==========================================================
class WithdrawalValidator:
    @staticmethod
    def validate_withdrawal_request(user: User, amount: Decimal):
        """
        Raise unless the account may withdraw `amount`:
        wallet >= 100, wallet >= amount, and the membership fee is paid.
        """
        wallet = Decimal(str(user.wallet or 0))

        if wallet < WithdrawalConfig.MIN_WALLET_BALANCE or wallet < amount:
            raise InsufficientBalanceError("Insufficient balance")

        if not user.has_paid:
            raise UnpaidAccountError("Please pay the membership fee before withdrawing")

# ==========================================================
#                  WITHDRAWAL RECORD MANAGER
# ==========================================================
class WithdrawalRecordManager:
    @staticmethod
    def create_withdrawal(phone: str, upi_id: str, amount: Decimal) -> Withdrawal:
        """Create a Pending withdrawal and debit the wallet in the same commit."""
        user = User.query.filter_by(phone=phone).first()
        if not user:
            raise NotFoundError("User not found")

        WithdrawalValidator.validate_withdrawal_request(user, amount)

        withdrawal = Withdrawal(
            phone=phone,
            upi_id=upi_id,
            amount=amount,
            status=WithdrawalStatus.PENDING.value,
        )
        user.wallet = Decimal(str(user.wallet)) - amount

        db.session.add(withdrawal)
        db.session.commit()

        logger.info(f"Withdrawal {withdrawal.id} of {amount} requested by {phone}, wallet now {user.wallet}")
        return withdrawal

    @staticmethod
    def update_withdrawal_status(withdrawal_id: int, status: str) -> Withdrawal:
        """
        Move a Pending withdrawal to a terminal state.
        Rejected withdrawals are refunded to the account's wallet.
        """
        if status not in WithdrawalStatus.values():
            raise ValidationError(f"Status must be one of {', '.join(WithdrawalStatus.values())}")

        withdrawal = db.session.get(Withdrawal, withdrawal_id)
        if not withdrawal:
            raise NotFoundError("Withdrawal not found")

        if withdrawal.status == status:
            return withdrawal

        if withdrawal.status != WithdrawalStatus.PENDING.value:
            raise InvalidTransitionError(f"Withdrawal already {withdrawal.status}")

        if status == WithdrawalStatus.REJECTED.value:
            user = User.query.filter_by(phone=withdrawal.phone).first()
            if user:
                user.wallet = Decimal(str(user.wallet or 0)) + Decimal(str(withdrawal.amount))
                logger.info(f"Refunded {withdrawal.amount} to {user.phone} for rejected withdrawal {withdrawal.id}")

        withdrawal.status = status
        withdrawal.processed_at = datetime.now(timezone.utc)
        db.session.commit()

        logger.info(f"Withdrawal {withdrawal.id} marked {status}")
        return withdrawal
