from datetime import datetime, timedelta, timezone
from typing import TypedDict

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.future import select

from couponme.core import security
from couponme.models.category import Category
from couponme.models.coupon import Coupon, CouponStatus
from couponme.models.user import User, UserRole


class SeedCategory(TypedDict):
    slug: str
    name_en: str
    name_el: str


class SeedUser(TypedDict):
    email: str
    password: str
    name: str
    role: UserRole


class SeedCoupon(TypedDict):
    title: str
    description: str
    code: str
    business_email: str
    category_slug: str
    discount_percentage: int
    days_valid: int
    status: CouponStatus


DEFAULT_CATEGORIES: list[SeedCategory] = [
    {"slug": "electronics", "name_en": "Electronics", "name_el": "Ηλεκτρονικά"},
    {"slug": "fashion", "name_en": "Fashion", "name_el": "Μόδα"},
    {"slug": "food", "name_en": "Food & Dining", "name_el": "Φαγητό & Εστιατόρια"},
    {"slug": "travel", "name_en": "Travel", "name_el": "Ταξίδια"},
    {"slug": "beauty", "name_en": "Beauty & Health", "name_el": "Ομορφιά & Υγεία"},
    {"slug": "home", "name_en": "Home & Garden", "name_el": "Σπίτι & Κήπος"},
    {"slug": "sports", "name_en": "Sports & Fitness", "name_el": "Αθλητισμός & Γυμναστική"},
    {"slug": "entertainment", "name_en": "Entertainment", "name_el": "Ψυχαγωγία"},
]

DEMO_USERS: list[SeedUser] = [
    {"email": "admin@couponme.com", "password": "admin123", "name": "Admin User", "role": UserRole.ADMIN},
    {"email": "techstore@example.com", "password": "business123", "name": "TechStore", "role": UserRole.BUSINESS},
    {"email": "foodcorner@example.com", "password": "business123", "name": "Food Corner", "role": UserRole.BUSINESS},
    {"email": "user@example.com", "password": "user12345", "name": "Demo User", "role": UserRole.USER},
]

DEMO_COUPONS: list[SeedCoupon] = [
    {
        "title": "50% OFF on All Laptops",
        "description": "Get an amazing 50% discount on all laptop models from the latest brands. Limited time offer!",
        "code": "LAPTOP50",
        "business_email": "techstore@example.com",
        "category_slug": "electronics",
        "discount_percentage": 50,
        "days_valid": 60,
        "status": CouponStatus.APPROVED,
    },
    {
        "title": "20% OFF Gaming Accessories",
        "description": "Level up your gaming setup with 20% off keyboards, mice and headsets.",
        "code": "GAME20",
        "business_email": "techstore@example.com",
        "category_slug": "electronics",
        "discount_percentage": 20,
        "days_valid": 30,
        "status": CouponStatus.PENDING,
    },
    {
        "title": "15% OFF All Orders",
        "description": "Enjoy delicious meals with 15% discount on all menu items, online or dine-in.",
        "code": "FOOD15",
        "business_email": "foodcorner@example.com",
        "category_slug": "food",
        "discount_percentage": 15,
        "days_valid": 30,
        "status": CouponStatus.APPROVED,
    },
    {
        "title": "2 for 1 Movie Tickets",
        "description": "Buy one movie ticket and get one free. Valid for all shows and all days.",
        "code": "MOVIE2FOR1",
        "business_email": "foodcorner@example.com",
        "category_slug": "entertainment",
        "discount_percentage": 50,
        "days_valid": 30,
        "status": CouponStatus.REJECTED,
    },
]


async def seed_categories(session: AsyncSession, categories: list[SeedCategory] = DEFAULT_CATEGORIES) -> int:
    created = 0
    for cat in categories:
        existing = await session.execute(select(Category).where(Category.slug == cat["slug"]))
        if existing.scalar_one_or_none():
            continue
        session.add(Category(**cat))
        created += 1
    await session.commit()
    return created


async def _seed_users(session: AsyncSession, users: list[SeedUser]) -> dict[str, User]:
    by_email: dict[str, User] = {}
    for entry in users:
        result = await session.execute(select(User).where(User.email == entry["email"]))
        user = result.scalar_one_or_none()
        if user is None:
            user = User(
                email=entry["email"],
                hashed_password=security.hash_password(entry["password"]),
                name=entry["name"],
                role=entry["role"],
            )
            session.add(user)
        by_email[entry["email"]] = user
    await session.commit()
    return by_email


async def _seed_coupons(session: AsyncSession, coupons: list[SeedCoupon], users: dict[str, User]) -> None:
    now = datetime.now(timezone.utc)
    for item in coupons:
        business = users[item["business_email"]]
        existing = await session.execute(
            select(Coupon).where(Coupon.code == item["code"], Coupon.business_id == business.id)
        )
        if existing.scalar_one_or_none():
            continue
        category = (await session.execute(select(Category).where(Category.slug == item["category_slug"]))).scalar_one()
        session.add(
            Coupon(
                title=item["title"],
                description=item["description"],
                code=item["code"],
                discount_percentage=item["discount_percentage"],
                expiration_date=now + timedelta(days=item["days_valid"]),
                status=item["status"],
                business_id=business.id,
                category_id=category.id,
            )
        )
    await session.commit()


async def seed(session: AsyncSession, *, demo: bool = False) -> None:
    await seed_categories(session)
    if demo:
        users = await _seed_users(session, DEMO_USERS)
        await _seed_coupons(session, DEMO_COUPONS, users)
