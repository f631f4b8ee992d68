"""Seed a demo catalog (genres, directors, movies) into an empty myFlix store."""

from bson.objectid import ObjectId
from pymongo.database import Database

from config import Settings
from database import DIRECTORS, GENRES, MOVIES, create_document, get_database
from logger import configure_logging, get_logger
from schemas import Director, Genre, Movie

logger = get_logger("seed")

DEMO_GENRES = [
    {"Name": "Drama", "Description": "Serious narratives driven by realistic characters and emotional themes."},
    {"Name": "Science Fiction", "Description": "Speculative stories built on imagined science and technology."},
    {"Name": "Thriller", "Description": "Suspense-driven plots designed to keep the audience on edge."},
]

DEMO_DIRECTORS = [
    {"Name": "Christopher Nolan", "Bio": "British-American filmmaker known for non-linear storytelling.", "Birth": 1970},
    {"Name": "Denis Villeneuve", "Bio": "Canadian filmmaker known for atmospheric science fiction.", "Birth": 1967},
    {"Name": "Alfred Hitchcock", "Bio": "English filmmaker, the Master of Suspense.", "Birth": 1899, "Death": 1980},
]

DEMO_MOVIES = [
    {"Title": "Inception", "Description": "A thief steals secrets through dream-sharing technology.",
     "Genre": "Science Fiction", "Director": "Christopher Nolan", "ImagePath": "inception.png", "Featured": True},
    {"Title": "Arrival", "Description": "A linguist works to communicate with alien visitors.",
     "Genre": "Science Fiction", "Director": "Denis Villeneuve", "ImagePath": "arrival.png"},
    {"Title": "Prisoners", "Description": "A father takes matters into his own hands after his daughter vanishes.",
     "Genre": "Thriller", "Director": "Denis Villeneuve", "ImagePath": "prisoners.png"},
    {"Title": "Vertigo", "Description": "A retired detective becomes obsessed with a mysterious woman.",
     "Genre": "Thriller", "Director": "Alfred Hitchcock", "ImagePath": "vertigo.png", "Featured": True},
    {"Title": "Memento", "Description": "A man with short-term memory loss hunts his wife's killer.",
     "Genre": "Drama", "Director": "Christopher Nolan", "ImagePath": "memento.png"},
]


def seed_demo_catalog(db: Database) -> dict:
    count = db[MOVIES].count_documents({})
    if count > 0:
        logger.info("Catalog already seeded (%d movies)", count)
        return {"message": "Catalog already seeded", "count": count}

    genre_ids = {g["Name"]: ObjectId(create_document(db, GENRES, Genre(**g))) for g in DEMO_GENRES}
    director_ids = {d["Name"]: ObjectId(create_document(db, DIRECTORS, Director(**d))) for d in DEMO_DIRECTORS}

    inserted = 0
    for m in DEMO_MOVIES:
        movie = Movie(**{**m, "Genre": genre_ids[m["Genre"]], "Director": director_ids[m["Director"]]})
        if create_document(db, MOVIES, movie):
            inserted += 1
    logger.info("Seeded %d genres, %d directors, %d movies", len(genre_ids), len(director_ids), inserted)
    return {"message": "Seeded", "inserted": inserted}


if __name__ == "__main__":
    settings = Settings.from_env()
    configure_logging(settings.log_level)
    seed_demo_catalog(get_database(settings))
