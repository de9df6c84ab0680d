"""
Seed the database with demo data.

Wipes every table, then inserts a small community: users (all with the
password "pass1234"), topics, posts, replies and likes. With --images,
sample pictures are downloaded into the post images folder and attached
to the posts.

Usage:
    crisper-seed [--images]
"""

import argparse
import asyncio
import logging
import uuid
from typing import List, Optional

import httpx
from sqlalchemy import delete, insert, text

from crisper.app import storage
from crisper.app.config import settings
from crisper.app.db import close_engine, get_engine, init_db
from crisper.app.schema import post_likes, post_replies, posts, topics, users
from crisper.app.security import hash_password

logger = logging.getLogger(__name__)

SEED_IMAGE_URLS = [
    "https://images.unsplash.com/photo-1464822759023-fed622ff2c3b?w=800",
    "https://images.unsplash.com/photo-1507525428034-b723cf961d3e?w=800",
    "https://images.unsplash.com/photo-1490750967868-88aa4486c946?w=800",
    "https://images.unsplash.com/photo-1448375240586-882707db888b?w=800",
    "https://images.unsplash.com/photo-1504280390367-361c6d9f38f4?w=800",
    "https://images.unsplash.com/photo-1592841200221-a6898f307baa?w=800",
    "https://images.unsplash.com/photo-1514888286974-6c03e2ca1dba?w=800",
    "https://images.unsplash.com/photo-1499636136210-6f4ee915583e?w=800",
]

SEED_PASSWORD = "pass1234"

MOCK_USERS = [
    {"name": "Ming", "email": "ming@example.com", "description": "Into hiking and photography"},
    {"name": "Meiling", "email": "meiling@example.com", "description": "Loves nature and travel"},
    {"name": "Zhiming", "email": "zhiming@example.com", "description": "Outdoor sports fan"},
    {"name": "Yating", "email": "yating@example.com", "description": "Birdwatching and eco-tours"},
    {"name": "Jianhong", "email": "jianhong@example.com", "description": "Camping enthusiast"},
    {"name": "Xiaochun", "email": "xiaochun@example.com", "description": "Recording the beauty of nature"},
]

MOCK_TOPICS = ["Mountains", "Ocean", "Forest", "Rivers", "Night sky", "Sunrise and sunset", "Wildlife"]

MOCK_POSTS = [
    (1, "Sunrise on Jade Mountain", "Mountains",
     "Set off at 3am and finally watched the sunrise from the summit. The sea of clouds turned orange and gold. Worth every step."),
    (2, "Kenting's coast is stunning", "Ocean",
     "Went snorkeling in Kenting today. Crystal clear water, tropical fish, coral and even a sea turtle swimming by."),
    (3, "The giant trees of Alishan", "Forest",
     "Finally saw the sacred trees of Alishan. Walking between thousand-year-old trees in that fresh air lifts your mood."),
    (4, "A kingfisher by the creek", "Wildlife",
     "Waited two hours by the creek and finally caught it diving for fish. Birdwatching takes patience but that moment pays off."),
    (5, "Stargazing at Hehuan Mountain", "Night sky",
     "Camped at Hehuan over the weekend. The Milky Way was clearly visible and we saw several shooting stars."),
    (6, "Sunrise reflections on Sun Moon Lake", "Sunrise and sunset",
     "The lake was flat as a mirror at dawn, mountains and clouds reflected perfectly. No wonder people call it the prettiest lake."),
    (4, "Spoonbills on the Tamsui river", "Wildlife",
     "Spotted a flock of black-faced spoonbills today. Winter is a great birding season, any other spots to see them?"),
    (1, "Sea of clouds at Taroko", "Mountains",
     "First trip to Taroko and we got lucky with a sea of clouds right below our feet. It felt like another world."),
]

MOCK_REPLIES = [
    (1, 2, "So beautiful! I want to see the Jade Mountain sunrise too"),
    (1, 4, "Climbing Jade Mountain is on my bucket list!"),
    (2, 3, "Kenting's sea really is amazing, I want to snorkel there next time"),
    (2, 6, "Sea turtles are so cute! Which bay was it?"),
    (3, 1, "The air in Alishan is great, walking in the forest is so relaxing"),
    (4, 2, "Such a hard bird to photograph! You were lucky"),
    (4, 5, "I'd like to start birdwatching, any spots you'd recommend?"),
    (5, 3, "The stars at Hehuan are incredible!"),
    (5, 1, "Gorgeous sky! I want to go camping and stargaze too"),
    (6, 4, "Sun Moon Lake is lovely, I also went for the sunrise last time"),
    (7, 5, "Spoonbills are adorable! Their beaks are so distinctive"),
    (8, 2, "That sea of clouds is unreal! How did you take the shot?"),
    (8, 3, "I want to visit Taroko too, do you need to book ahead?"),
]

MOCK_LIKES = [
    (2, 1), (3, 1), (4, 1),
    (1, 2), (3, 2), (5, 2),
    (1, 3), (2, 3), (6, 3),
    (2, 4), (5, 4), (6, 4),
    (1, 5), (3, 5), (4, 5),
    (1, 6), (3, 6), (4, 6), (5, 6),
    (1, 7), (2, 7), (5, 7),
    (2, 8), (3, 8), (4, 8), (5, 8), (6, 8),
]


async def download_images() -> List[str]:
    """Fetch the sample pictures into the post images folder and return their URLs."""
    folder = storage.ensure_dirs() / storage.POST_IMAGES
    urls: List[str] = []

    async with httpx.AsyncClient(follow_redirects=True, timeout=30) as client:
        for source in SEED_IMAGE_URLS:
            resp = await client.get(source)
            resp.raise_for_status()
            file_name = f"{uuid.uuid4().hex}.jpg"
            (folder / file_name).write_bytes(resp.content)
            urls.append(f"{storage.URL_PREFIX}/{storage.POST_IMAGES}/{file_name}")

    logger.info(f"Downloaded {len(urls)} seed images")
    return urls


async def seed(images: Optional[List[str]] = None) -> None:
    """
    Reset all tables and insert the demo data.

    Args:
        images: Optional image URLs, attached one per post in order.
    """
    await init_db()
    password = hash_password(SEED_PASSWORD)

    async with get_engine().begin() as conn:
        if conn.dialect.name == "postgresql":
            # Restart ids at 1 so the fixed references below line up
            await conn.execute(
                text("TRUNCATE post_likes, post_replies, posts, topics, users RESTART IDENTITY")
            )
        else:
            # SQLite reuses rowids, so emptied tables start again at 1
            for table in (post_likes, post_replies, posts, topics, users):
                await conn.execute(delete(table))

        await conn.execute(
            insert(users),
            [{**u, "password": password} for u in MOCK_USERS],
        )
        await conn.execute(insert(topics), [{"name": name} for name in MOCK_TOPICS])
        await conn.execute(
            insert(posts),
            [
                {
                    "creator": creator,
                    "title": title,
                    "topics": topic,
                    "content": content,
                    "images": [images[i]] if images and i < len(images) else None,
                }
                for i, (creator, title, topic, content) in enumerate(MOCK_POSTS)
            ],
        )
        await conn.execute(
            insert(post_replies),
            [
                {"post_id": post_id, "user_id": user_id, "content": content}
                for post_id, user_id, content in MOCK_REPLIES
            ],
        )
        await conn.execute(
            insert(post_likes),
            [{"user_id": user_id, "post_id": post_id} for user_id, post_id in MOCK_LIKES],
        )

    logger.info(
        f"Seeded {len(MOCK_USERS)} users, {len(MOCK_TOPICS)} topics, {len(MOCK_POSTS)} posts, "
        f"{len(MOCK_REPLIES)} replies and {len(MOCK_LIKES)} likes"
    )


async def _run(with_images: bool) -> None:
    try:
        images = await download_images() if with_images else None
        await seed(images)
    finally:
        await close_engine()


def main() -> None:
    parser = argparse.ArgumentParser(description="Reset the Crisper database with demo data.")
    parser.add_argument(
        "--images",
        action="store_true",
        help="download sample pictures and attach them to the seeded posts",
    )
    args = parser.parse_args()

    logging.basicConfig(level=settings.LOG_LEVEL.upper())
    asyncio.run(_run(args.images))
    print("Done")


if __name__ == "__main__":
    main()
