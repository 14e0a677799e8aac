from qlive.shared.config import config
from qlive.shared.storage.mongo import get_mongo_client
from qlive.schemas.init import init_beanie_odm


async def init_schema():
    mongo_client = get_mongo_client(config.get_mongo_label())
    db = mongo_client.get_default_database("qlive")
    await init_beanie_odm(db)


if __name__ == "__main__":
    import asyncio

    asyncio.run(init_schema())
