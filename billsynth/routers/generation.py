import logging
from fastapi import APIRouter, Depends, HTTPException, status
from billsynth.db.schemas.generation import (
    CashGenerationRequest, GenerationResponse, InventoryValueRequest,
    InventoryValueResponse, UpiGenerationRequest,
)
from billsynth.core.dependencies import get_generation_service
from billsynth.services.generation_service import GenerationService

logger = logging.getLogger(__name__)
router = APIRouter()

@router.post("/generate/upi", response_model=GenerationResponse)
async def generate_upi_bills(
        request: UpiGenerationRequest,
        service: GenerationService = Depends(get_generation_service),
):
    """
    One bill per target row, each landing within the single-shot margin.
    Rows with a bad amount or no date are skipped and reported in the log.
    """
    try:
        return await service.generate_upi(request)
    except ValueError as e:
        logger.warning(f"UPI generation rejected: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"System error generating UPI bills: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not generate bills."
        )

@router.post("/generate/cash", response_model=GenerationResponse)
async def generate_cash_bills(
        request: CashGenerationRequest,
        service: GenerationService = Depends(get_generation_service),
):
    """
    Spread each day's target over bills between min_bill and max_bill.
    Days that cannot be filled are reported in the skip log.
    """
    try:
        return await service.generate_cash(request)
    except ValueError as e:
        logger.warning(f"Cash generation rejected: {e}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except Exception as e:
        logger.error(f"System error generating cash bills: {e}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Could not generate bills."
        )

@router.post("/inventory/value", response_model=InventoryValueResponse)
async def get_inventory_value(request: InventoryValueRequest):
    item_count, total = GenerationService.inventory_value(request.inventory)
    return InventoryValueResponse(item_count=item_count, total_stock_value=total)
