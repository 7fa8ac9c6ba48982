import asyncio
from datetime import datetime

from core.clock import FixedClock
from services.dispatcher import Dispatcher
from storage.memory import InMemoryStorage

CONVERSATION = [
    "catat pemasukan 5jt gaji",
    "catat pengeluaran 50rb makan siang",
    "bayar",
    "25rb",
    "ya",
    "atur budget makan 100rb",
    "jajan kopi 40rb",
    "cek budget",
    "tambah goal tabungan 10jt desember 2024",
    "update goal tabungan 500rb",
    "lihat goal",
    "riwayat transaksi",
    "asdkjasd",
]


async def main():
    dispatcher = Dispatcher(InMemoryStorage(), clock=FixedClock(datetime(2024, 6, 1, 12, 0)))
    user_id = "demo-user"

    for user_text in CONVERSATION:
        reply = await dispatcher.handle(user_id, user_text)
        print(f"> {user_text}")
        if reply.kind == "report":
            print(reply.intro_message)
            print(reply.summary_data.model_dump_json(indent=2))
        elif reply.kind == "confirmation":
            print(f"{reply.prompt} [{' / '.join(reply.options)}]")
        else:
            print(reply.content)
        for advisory in reply.advisories:
            print(f"(i) {advisory}")
        print()

if __name__ == "__main__":
    import sys
    if sys.platform.startswith("win"):
        asyncio.set_event_loop_policy(asyncio.WindowsSelectorEventLoopPolicy())
    asyncio.run(main())
