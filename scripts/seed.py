"""Seed the database with demo users, posts, likes and comments."""
import asyncio
import argparse
import random
import time
from datetime import datetime, timezone, timedelta

from social_posts.database import engine, async_session, Base
from social_posts.models import User, Post, LikePost, CommentPost

TOPICS = ["coffee", "hiking", "python", "music", "cooking", "travel",
          "photography", "books", "running", "gardening"]


async def seed(small: bool = False):
    num_users = 10 if small else 200
    num_posts = 50 if small else 5000
    max_comments_per_post = 3 if small else 8

    print(f"Seeding: {num_users} users, {num_posts} posts")
    start = time.perf_counter()

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    async with async_session() as session:
        users = []
        for i in range(num_users):
            user = User(username=f"user_{i:04d}", email=f"user_{i:04d}@example.com")
            session.add(user)
            users.append(user)
        await session.flush()
        print(f"  Created {len(users)} users")

        total_likes = 0
        total_comments = 0
        batch_size = 500
        for batch_start in range(0, num_posts, batch_size):
            batch_end = min(batch_start + batch_size, num_posts)
            posts = []
            for i in range(batch_start, batch_end):
                created = datetime.now(timezone.utc) - timedelta(days=random.randint(0, 365))
                post = Post(
                    content=f"Post {i}: some thoughts about {random.choice(TOPICS)}.",
                    slug=f"post-{i}",
                    created_at=created,
                    updated_at=created,
                    user_id=random.choice(users).id,
                )
                session.add(post)
                posts.append(post)
            await session.flush()

            for post in posts:
                # Each user likes a post at most once.
                for liker in random.sample(users, k=random.randint(0, min(10, num_users))):
                    session.add(LikePost(user_id=liker.id, post_id=post.id))
                    total_likes += 1
                for _ in range(random.randint(0, max_comments_per_post)):
                    commenter = random.choice(users)
                    session.add(CommentPost(
                        content=f"Nice post! ({commenter.username})",
                        user_id=commenter.id,
                        post_id=post.id,
                    ))
                    total_comments += 1
            await session.flush()
            print(f"  Batch {batch_start}-{batch_end}: posts created")

        await session.commit()

    elapsed = time.perf_counter() - start
    print(f"\nSeeding complete in {elapsed:.1f}s")
    print(f"  Users: {num_users}")
    print(f"  Posts: {num_posts}")
    print(f"  Likes: {total_likes}")
    print(f"  Comments: {total_comments}")


def main():
    parser = argparse.ArgumentParser(description="Seed the social posts database")
    parser.add_argument("--small", action="store_true", help="Use small dataset (50 posts)")
    args = parser.parse_args()
    asyncio.run(seed(small=args.small))


if __name__ == "__main__":
    main()
