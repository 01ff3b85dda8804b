import setuptools

setuptools.setup(
    name="mtg_deck_editor",
    version="0.3",
    author="yochi",
    author_email="pedrogush@gmail.com",
    description="MTG deck editor core: card filters, categorized decks and MTGJSON inventory loading",
    packages=["cards", "filters", "decks", "repositories", "services", "utils"],
    py_modules=["main"],
    classifiers=["Programming Language :: Python :: 3"],
    python_requires=">=3.11",
    install_requires=[
        "loguru",
        "pillow",  # Category color tags
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["mtg-deck-editor=main:main"],
    },
)
