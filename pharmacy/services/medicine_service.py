import logging

from motor.motor_asyncio import AsyncIOMotorDatabase

from pharmacy.models.medicine import Medicine
from pharmacy.repositories.medicine_repo import MedicineRepository
from pharmacy.repositories.vendor_repo import VendorRepository
from pharmacy.schemas.ledger import PaymentStatusUpdate
from pharmacy.schemas.medicine import MedicineCreate, MedicineUpdate
from pharmacy.services.ledger import apply_payment_status
from pharmacy.utils.validation import validate_medicine

logger = logging.getLogger(__name__)


class MedicineService:
    @staticmethod
    async def create(db: AsyncIOMotorDatabase, medicine_in: MedicineCreate) -> Medicine:
        """Create a medicine with its opening purchase ledger."""
        validate_medicine(medicine_in)
        vendor = await VendorRepository(db).get(medicine_in.vendor_id)

        data = medicine_in.model_dump(exclude={"vendor_id", "payment_status", "paid_amount_cents"})
        data["composition"] = [part.strip() for part in data["composition"] if part.strip()]
        medicine = Medicine(**data, vendor_id=vendor.id)

        medicine = apply_payment_status(
            medicine, medicine_in.payment_status, medicine_in.paid_amount_cents
        )

        await MedicineRepository(db).insert(medicine)
        logger.info("Medicine %s (%s) added, %s due", medicine.id, medicine.name, medicine.due_amount_cents)
        return medicine

    @staticmethod
    async def update(db: AsyncIOMotorDatabase, medicine_id: str, update_in: MedicineUpdate) -> Medicine:
        validate_medicine(update_in)
        medicines = MedicineRepository(db)
        updates = update_in.model_dump(exclude_unset=True, exclude_none=True)

        if "vendor_id" in updates:
            vendor = await VendorRepository(db).get(updates["vendor_id"])
            updates["vendor_id"] = vendor.id

        if not updates:
            return await medicines.get(medicine_id)
        return await medicines.update_fields(medicine_id, updates)

    @staticmethod
    async def update_payment(
        db: AsyncIOMotorDatabase, medicine_id: str, payment_in: PaymentStatusUpdate
    ) -> Medicine:
        medicines = MedicineRepository(db)
        medicine = await medicines.get(medicine_id)
        updated = apply_payment_status(
            medicine, payment_in.payment_status, payment_in.paid_amount_cents
        )
        return await medicines.save_ledger(medicine, updated)

    @staticmethod
    async def set_archived(db: AsyncIOMotorDatabase, medicine_id: str, archived: bool) -> Medicine:
        medicine = await MedicineRepository(db).update_fields(medicine_id, {"is_archived": archived})
        logger.info("Medicine %s %s", medicine_id, "archived" if archived else "unarchived")
        return medicine
