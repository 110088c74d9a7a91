from .router import router
from .service import ItineraryService
from .schemas import ItineraryCreate, ItineraryUpdate, ItineraryResponse

__all__ = ["router", "ItineraryService", "ItineraryCreate", "ItineraryUpdate", "ItineraryResponse"]
