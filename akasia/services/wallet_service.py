from sqlalchemy import func

from akasia.extensions import db
from akasia.models.wallet import GLOBAL_WALLET_NAME, Wallet, WalletEntry


def get_or_create_wallet() -> Wallet:
    wallet = Wallet.query.filter_by(name=GLOBAL_WALLET_NAME).first()
    if wallet is None:
        wallet = Wallet(name=GLOBAL_WALLET_NAME)
        db.session.add(wallet)
        db.session.flush()
    return wallet


def _sum_entries(wallet: Wallet, entry_type: str) -> int:
    total = db.session.query(func.coalesce(func.sum(WalletEntry.amount), 0)).filter(
        WalletEntry.wallet_id == wallet.id,
        WalletEntry.type == entry_type
    ).scalar()
    return int(total or 0)


def get_wallet_balance(wallet: Wallet) -> int:
    return _sum_entries(wallet, 'CREDIT') - _sum_entries(wallet, 'DEBIT')


def get_wallet_overview(limit=25) -> dict:
    wallet = get_or_create_wallet()
    entries = (
        WalletEntry.query
        .filter_by(wallet_id=wallet.id)
        .order_by(WalletEntry.occurred_at.desc(), WalletEntry.id.desc())
        .limit(limit)
        .all()
    )
    return {
        'wallet': wallet,
        'balance': get_wallet_balance(wallet),
        'entries': entries,
    }
