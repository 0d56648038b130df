import sys
import os
import asyncio
sys.path.append(os.getcwd())
from sqlalchemy import select
from app.db.session import async_session_factory
from app.models.product import Product, StockEntry
from app.schemas.product import StockEntryCreate
from app.services.inventory import record_entry
import random

# 💀 DB OBLITERATOR: STOCK STAMPEDE
# Usage: python tests/stress/db_obliterator.py <product_id> <user_id>

async def receive(product_id, user_id, qty):
    async with async_session_factory() as session:
        try:
            await record_entry(session, StockEntryCreate(product_id=product_id, quantity=qty), user_id)
            return qty
        except Exception as e:
            print(f"❌ Entry of {qty} failed: {e}")
            return 0

async def stock_stampede(product_id, user_id):
    async with async_session_factory() as session:
        before = (await session.execute(select(Product.current_stock).where(Product.id == product_id))).scalar_one()

    print("💀 LAUNCHING 100 CONCURRENT GOODS RECEIPTS AGAINST ONE PRODUCT...")
    quantities = [random.randint(1, 50) for _ in range(100)]
    landed = await asyncio.gather(*(receive(product_id, user_id, q) for q in quantities))

    async with async_session_factory() as session:
        after = (await session.execute(select(Product.current_stock).where(Product.id == product_id))).scalar_one()

    expected = before + sum(landed)
    if after == expected:
        print(f"✅ No lost updates: {before} + {sum(landed)} = {after}")
    else:
        print(f"❌ CRITICAL: stock is {after}, expected {expected}!")

if __name__ == "__main__":
    if sys.platform == "win32":
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(stock_stampede(int(sys.argv[1]), int(sys.argv[2])))
