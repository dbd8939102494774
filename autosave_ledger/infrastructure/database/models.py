"""SQLAlchemy ORM models for the ledger tables"""

from sqlalchemy import Column, String, BigInteger, Boolean, Float, Date, DateTime, Integer, ForeignKey, Text
from sqlalchemy.orm import declarative_base, relationship
from sqlalchemy.sql import func

Base = declarative_base()


class AccountRecord(Base):
    """Bank account imported from a bank connection"""

    __tablename__ = "account"

    id = Column(Integer, primary_key=True)
    bank_id = Column(String(32), nullable=False, index=True)
    number = Column(Text, nullable=False)
    balance_cents = Column(BigInteger, nullable=False, default=0)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    transactions = relationship(
        "TransactionRecord",
        back_populates="account",
        cascade="all, delete-orphan",
        order_by="TransactionRecord.id.desc()",
    )


class TransactionRecord(Base):
    """Account transaction; newest first is id descending"""

    __tablename__ = "account_transaction"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("account.id", ondelete="CASCADE"), nullable=False, index=True)
    date = Column(Date, nullable=False)
    description = Column(Text, nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    type = Column(String(16), nullable=False)
    category = Column(Text, nullable=True)
    sender = Column(Text, nullable=True)

    account = relationship("AccountRecord", back_populates="transactions")


class GoalRecord(Base):
    """Savings goal; version is bumped by SQLAlchemy on every UPDATE"""

    __tablename__ = "goal"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    target_cents = Column(BigInteger, nullable=False)
    current_cents = Column(BigInteger, nullable=False, default=0)
    monthly_cents = Column(BigInteger, nullable=False, default=0)
    next_deposit = Column(Date, nullable=False)
    bank_id = Column(String(32), nullable=False)
    # "order" is reserved in SQL
    order = Column("position", Integer, nullable=False)
    version = Column(Integer, nullable=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    deposits = relationship(
        "DepositRecord",
        back_populates="goal",
        cascade="all, delete-orphan",
        order_by="DepositRecord.id",
    )

    __mapper_args__ = {"version_id_col": version}


class DepositRecord(Base):
    """Contribution toward a goal"""

    __tablename__ = "deposit"

    id = Column(Integer, primary_key=True)
    goal_id = Column(Integer, ForeignKey("goal.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="pending")

    goal = relationship("GoalRecord", back_populates="deposits")


class LoanRecord(Base):
    """Loan with auto-payment settings"""

    __tablename__ = "loan"

    id = Column(Integer, primary_key=True)
    name = Column(Text, nullable=False)
    debt_cents = Column(BigInteger, nullable=False)
    rate = Column(Float, nullable=False, default=0.0)
    monthly_payment_cents = Column(BigInteger, nullable=False, default=0)
    next_payment = Column(Date, nullable=False)
    bank_id = Column(String(32), nullable=False)
    auto_payment = Column(Boolean, nullable=False, default=False)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())

    payments = relationship(
        "PaymentRecord",
        back_populates="loan",
        cascade="all, delete-orphan",
        order_by="PaymentRecord.id",
    )


class PaymentRecord(Base):
    """Loan payment"""

    __tablename__ = "loan_payment"

    id = Column(Integer, primary_key=True)
    loan_id = Column(Integer, ForeignKey("loan.id", ondelete="CASCADE"), nullable=False, index=True)
    amount_cents = Column(BigInteger, nullable=False)
    date = Column(Date, nullable=False)
    status = Column(String(16), nullable=False, default="pending")

    loan = relationship("LoanRecord", back_populates="payments")


class OperationRecord(Base):
    """Append-only fund movement log"""

    __tablename__ = "operation"
    # SQLite would otherwise recycle the ids of deleted rows
    __table_args__ = {"sqlite_autoincrement": True}

    id = Column(Integer, primary_key=True)
    date = Column(Date, nullable=False, index=True)
    type = Column(String(32), nullable=False)
    amount_cents = Column(BigInteger, nullable=False)
    status = Column(String(16), nullable=False)
    goal = Column(Text, nullable=True)
    loan = Column(Text, nullable=True)
    error = Column(Text, nullable=True)
    created_at = Column(DateTime(timezone=True), nullable=False, server_default=func.now())
