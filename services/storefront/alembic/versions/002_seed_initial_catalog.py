"""seed_initial_catalog

Revision ID: 002
Revises: 001
Create Date: 2025-03-02 12:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision = '002'
down_revision = '001'
branch_labels = None
depends_on = None


# Starter catalog; one product ships out of stock so reservations can be tried right away
products = [
    {
        'name': 'Sérum Éclat Vitamine C',
        'description': 'Sérum illuminateur à la vitamine C pour un teint unifié.',
        'category': 'Soins du visage',
        'price': 12500,
        'stock': 15,
        'image_urls': ['https://images.unsplash.com/photo-1620916566398-39f1143ab7be'],
    },
    {
        'name': 'Crème Hydratante Karité',
        'description': 'Crème riche au beurre de karité pour peaux sèches.',
        'category': 'Soins du visage',
        'price': 8000,
        'stock': 30,
        'image_urls': ['https://images.unsplash.com/photo-1611930022073-b7a4ba5fcccd'],
    },
    {
        'name': 'Huile Capillaire Nourrissante',
        'description': "Mélange d'huiles végétales pour cheveux secs et abîmés.",
        'category': 'Cheveux',
        'price': 6500,
        'stock': 0,
        'image_urls': ['https://images.unsplash.com/photo-1526947425960-945c6e72858f'],
    },
    {
        'name': 'Rouge à Lèvres Mat Terracotta',
        'description': 'Rouge à lèvres longue tenue, fini mat.',
        'category': 'Maquillage',
        'price': 5000,
        'stock': 40,
        'image_urls': ['https://images.unsplash.com/photo-1586495777744-4413f21062fa'],
    },
    {
        'name': 'Savon Noir Exfoliant',
        'description': 'Savon noir traditionnel pour un gommage doux.',
        'category': 'Corps',
        'price': 3500,
        'stock': 25,
        'image_urls': [],
    },
]


def upgrade() -> None:
    # Get connection to execute raw SQL
    connection = op.get_bind()

    for product in products:
        connection.execute(
            sa.text("""
                INSERT INTO products (name, description, category, price, currency, image_urls, stock, status)
                VALUES (:name, :description, :category, :price, 'XOF', :image_urls, :stock, 'active')
            """).bindparams(sa.bindparam('image_urls', type_=sa.JSON().with_variant(postgresql.JSONB(), "postgresql"))),
            {
                'name': product['name'],
                'description': product['description'],
                'category': product['category'],
                'price': product['price'],
                'image_urls': product['image_urls'],
                'stock': product['stock'],
            }
        )


def downgrade() -> None:
    connection = op.get_bind()
    connection.execute(
        sa.text("DELETE FROM products WHERE name IN :names").bindparams(
            sa.bindparam('names', expanding=True)
        ),
        {'names': [product['name'] for product in products]}
    )
