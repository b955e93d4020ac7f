from typing import Dict, List

from app.core.config import settings
from app.core.logging import get_logger
from app.gateway import FARM, FARMER, GatewayClient
from app.schemas.farm import FarmCreate
from app.schemas.farmer import FarmerCreate

logger = get_logger(module="seed_data")

DEMO_FARMERS = [
    FarmerCreate(name="John Kamau", phone="+254 712 345 678", email="john.kamau@email.com", county="Kiambu"),
    FarmerCreate(name="Mary Wanjiku", phone="+254 723 456 789", email="mary.wanjiku@email.com", county="Nakuru"),
    FarmerCreate(name="David Mwangi", phone="+254 734 567 890", email="david.mwangi@email.com", county="Nyeri"),
    FarmerCreate(name="Grace Njeri", phone="+254 745 678 901", email="grace.njeri@email.com", county="Meru"),
]

# nombre de la granja → (email del agricultor, ubicación, hectáreas)
DEMO_FARMS = {
    "Green Valley Farm": ("john.kamau@email.com", "Kiambu County", 25.5),
    "Sunrise Organic": ("mary.wanjiku@email.com", "Nakuru County", 45.2),
    "Highland Coffee Estate": ("david.mwangi@email.com", "Nyeri County", 120.8),
    "Fresh Herbs Kenya": ("grace.njeri@email.com", "Meru County", 15.3),
}


def seed_farmers(gateway: GatewayClient) -> Dict[str, str]:
    """Devuelve email → id de agricultor (existentes o recién creados)."""
    existing = gateway.list_resource(FARMER)
    if existing:
        return {str(f.get("email")): str(f.get("id")) for f in existing}

    ids: Dict[str, str] = {}
    for farmer in DEMO_FARMERS:
        data, _ = gateway.create_resource(FARMER, farmer.model_dump(by_alias=True))
        ids[farmer.email] = str(data["id"])
    logger.info("Agricultores de demo creados", count=len(ids))
    return ids


def seed_farms(gateway: GatewayClient, farmer_ids: Dict[str, str]) -> List[str]:
    if gateway.list_resource(FARM):
        return []

    created = []
    for name, (email, location, area_ha) in DEMO_FARMS.items():
        farmer_id = farmer_ids.get(email)
        if farmer_id is None:
            logger.warning("Granja de demo sin agricultor", farm=name, email=email)
            continue
        farm = FarmCreate(name=name, location=location, area_ha=area_ha, farmer_id=farmer_id)
        gateway.create_resource(FARM, farm.model_dump(by_alias=True))
        created.append(name)
    logger.info("Granjas de demo creadas", count=len(created))
    return created


def main() -> None:
    with GatewayClient(
        settings.GATEWAY_BASE_URL,
        api_prefix=settings.GATEWAY_API_PREFIX,
        timeout=settings.GATEWAY_TIMEOUT_SECONDS,
    ) as gateway:
        farmer_ids = seed_farmers(gateway)
        farms = seed_farms(gateway, farmer_ids)
        print(f"✅ Seed completado: {len(farmer_ids)} farmers, {len(farms)} farms nuevas.")


if __name__ == "__main__":
    main()
