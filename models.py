# models.py: Flask-SQLAlchemy models for accounts, payments, withdrawals and commissions
from decimal import Decimal
import enum
from sqlalchemy import Index, text
from flask_login import UserMixin
from extensions import db
from werkzeug.security import check_password_hash, generate_password_hash

# ===========================================================
# ENUM DEFINITIONS
# ===========================================================

class Role(enum.Enum):
    MEMBER = "user"
    ADMIN = "admin"


class PaymentStatus(enum.Enum):
    PENDING = "Pending"
    SUCCESS = "Success"
    FAILED = "Failed"


class WithdrawalStatus(enum.Enum):
    PENDING = "Pending"
    APPROVED = "Approved"
    REJECTED = "Rejected"

    @classmethod
    def values(cls):
        return [status.value for status in cls]


# ===========================================================
# BASE MIXIN FOR COMMON FIELDS
# ===========================================================

class BaseMixin:
    """Provides created_at and updated_at timestamps to inheriting models."""
    created_at = db.Column(db.DateTime(timezone=True), default=db.func.now())
    updated_at = db.Column(db.DateTime(timezone=True),
                           default=db.func.now(),
                           onupdate=db.func.now())

# ===========================================================
# USER MODEL
# ===========================================================

class User(UserMixin, db.Model, BaseMixin):
    """Member account: wallet, payment flag and position in the referral network."""
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(20), unique=True, nullable=False)
    password_hash = db.Column(db.String(255), nullable=False)
    role = db.Column(db.String(20), nullable=False, default=Role.MEMBER.value, index=True)

    refer_code = db.Column(db.String(40), nullable=False)  # The referral code used during signup
    personal_refer_code = db.Column(db.String(40), unique=True, nullable=False)  # User's own referral code
    referred_by_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True)

    wallet = db.Column(db.Numeric(18, 2), nullable=False, default=Decimal("0.00"), server_default=text("0.00"))
    has_paid = db.Column(db.Boolean, nullable=False, default=False)

    # Relationships
    referred_by = db.relationship('User', remote_side=[id], back_populates='referrals')
    referrals = db.relationship('User', back_populates='referred_by', order_by='User.id')
    bonuses = db.relationship('ReferralBonus', back_populates='user',
                              foreign_keys='ReferralBonus.user_id', lazy='dynamic')

    __table_args__ = (
        Index('idx_user_phone', 'phone'),
        Index('idx_user_personal_refer_code', 'personal_refer_code'),
    )

    def set_password(self, password: str):
        self.password_hash = generate_password_hash(password)

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    @property
    def is_admin(self) -> bool:
        return self.role == Role.ADMIN.value

    def get_id(self):
        return self.phone

    def to_public_dict(self):
        """Redacted view used by admin listings."""
        return {
            "phone": self.phone,
            "personalReferCode": self.personal_refer_code,
            "wallet": float(self.wallet or 0),
            "hasPaid": bool(self.has_paid),
        }

    def __repr__(self):
        return f'<User {self.phone}>'

# ===========================================================
# PAYMENTS & WITHDRAWALS
# ===========================================================

class Payment(db.Model, BaseMixin):
    """One row per gateway order created through /pay."""
    __tablename__ = 'payments'

    id = db.Column(db.Integer, primary_key=True)
    order_id = db.Column(db.String(64), unique=True, nullable=False, index=True)
    phone = db.Column(db.String(20), nullable=False, index=True)
    amount = db.Column(db.Numeric(precision=10, scale=2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=PaymentStatus.PENDING.value)
    txn_id = db.Column(db.String(128), nullable=True)

    def to_dict(self):
        return {
            "phone": self.phone,
            "orderId": self.order_id,
            "amount": float(self.amount),
            "status": self.status,
        }


class Withdrawal(db.Model, BaseMixin):
    __tablename__ = 'withdrawals'

    id = db.Column(db.Integer, primary_key=True)
    phone = db.Column(db.String(20), nullable=False, index=True)
    upi_id = db.Column(db.String(255), nullable=False)  # destination payment address
    amount = db.Column(db.Numeric(precision=18, scale=2), nullable=False)
    status = db.Column(db.String(20), nullable=False, default=WithdrawalStatus.PENDING.value, index=True)
    processed_at = db.Column(db.DateTime(timezone=True), nullable=True)

    def to_dict(self):
        return {
            "id": self.id,
            "phone": self.phone,
            "upiId": self.upi_id,
            "amount": float(self.amount),
            "status": self.status,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "processedAt": self.processed_at.isoformat() if self.processed_at else None,
        }

# ===========================================================
# REFERRAL COMMISSIONS
# ===========================================================

class ReferralBonus(db.Model, BaseMixin):
    """Ledger row for every commission credited by the referral walk."""
    __tablename__ = 'referral_bonuses'

    id = db.Column(db.Integer, primary_key=True)
    user_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=False, index=True)  # beneficiary
    referred_id = db.Column(db.Integer, db.ForeignKey('users.id'), nullable=True, index=True)  # new member
    level = db.Column(db.Integer, nullable=False)  # 1-10
    bonus_percentage = db.Column(db.Numeric(5, 4), nullable=False)
    amount = db.Column(db.Numeric(18, 2), nullable=False)

    user = db.relationship('User', foreign_keys=[user_id], back_populates='bonuses')
    referred_user = db.relationship('User', foreign_keys=[referred_id])

    __table_args__ = (
        Index('idx_bonus_user_level', 'user_id', 'level'),
    )

    def to_dict(self):
        return {
            "level": self.level,
            "percentage": float(self.bonus_percentage),
            "amount": float(self.amount),
            "referred": self.referred_user.phone if self.referred_user else None,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
        }
