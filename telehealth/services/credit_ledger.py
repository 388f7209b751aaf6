import logging

from sqlalchemy.orm import Session

from telehealth.core.errors import CreditTransferError
from telehealth.models.user import User

logger = logging.getLogger(__name__)

APPOINTMENT_CREDIT_COST = 2


class CreditLedger:
    """Moves credits between two users inside the caller's transaction.

    Nothing is committed here; the caller commits or rolls back both balance
    changes together with whatever else it wrote.
    """

    def transfer(self, db: Session, from_user_id: int, to_user_id: int, amount: int) -> None:
        if amount <= 0:
            raise CreditTransferError(f'Transfer amount must be positive, got {amount}.')
        if from_user_id == to_user_id:
            raise CreditTransferError('Cannot transfer credits to the same user.')

        debited = db.query(User).filter(
            User.id == from_user_id,
            User.credits >= amount,
        ).update({User.credits: User.credits - amount}, synchronize_session=False)
        if debited != 1:
            raise CreditTransferError(f'User {from_user_id} does not have {amount} credits available.')

        credited = db.query(User).filter(
            User.id == to_user_id,
        ).update({User.credits: User.credits + amount}, synchronize_session=False)
        if credited != 1:
            raise CreditTransferError(f'User {to_user_id} cannot receive credits.')

        db.flush()
        logger.info('Transferred %s credits from user %s to user %s', amount, from_user_id, to_user_id)
