#!/usr/bin/env python3
"""
Seed products from a CSV file via the Storefront API

This script:
1. Reads a product CSV (name, description, category, price, stock, image_urls)
2. Logs in as an admin (or uses --token)
3. Creates each product via the API (triggers Kafka events)
4. Sets each product's stock through the stock endpoint

Usage:
    python seed_data.py \
        --csv datasets/products.csv \
        --storefront-url http://localhost:8000 \
        --admin-email admin@belleza.com \
        --admin-password secret
"""

import csv
import argparse
import requests
import time
import re
import logging
from typing import Dict, List, Optional, Any
from datetime import datetime

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(levelname)s - %(message)s',
    datefmt='%Y-%m-%d %H:%M:%S'
)
logger = logging.getLogger(__name__)


def parse_price(price_str: str) -> int:
    """Parse a price like '12 500 FCFA' or '12500' into whole currency units"""
    digits = re.sub(r'[^\d]', '', str(price_str or ''))
    return int(digits) if digits else 0


def parse_stock(stock_str: str) -> int:
    try:
        return max(0, int(str(stock_str).strip() or 0))
    except ValueError:
        return 0


def map_row(row: Dict[str, str]) -> Optional[Dict[str, Any]]:
    """Map a CSV row to the product create payload; None when the row is unusable"""
    name = row.get('name', '').strip()
    price = parse_price(row.get('price', ''))
    if not name or price <= 0:
        return None

    image_urls = [url.strip() for url in row.get('image_urls', '').split('|') if url.strip()]
    return {
        'name': name[:255],
        'description': row.get('description', '').strip() or None,
        'category': row.get('category', '').strip() or None,
        'price': price,
        'currency': 'XOF',
        'image_urls': image_urls,
        'status': 'active',
    }


class StorefrontAPIClient:
    """Client for the Storefront Service API"""

    def __init__(self, base_url: str, auth_token: Optional[str] = None):
        self.base_url = base_url.rstrip('/')
        self.session = requests.Session()
        self.session.headers['Content-Type'] = 'application/json'
        if auth_token:
            self.session.headers['Authorization'] = f'Bearer {auth_token}'

    def login(self, email: str, password: str) -> None:
        response = self.session.post(
            f'{self.base_url}/api/users/login',
            json={'email': email, 'password': password},
            timeout=10
        )
        response.raise_for_status()
        body = response.json()
        if body.get('user', {}).get('role') != 'admin':
            raise RuntimeError(f"{email} is not an admin account")
        self.session.headers['Authorization'] = f"Bearer {body['access_token']}"
        logger.info(f"✓ Logged in as {email}")

    def create_product(self, product_data: Dict[str, Any]) -> Optional[int]:
        """Create a product and return its ID"""
        start_time = time.time()
        try:
            response = self.session.post(
                f'{self.base_url}/api/products',
                json=product_data,
                timeout=10
            )
            response.raise_for_status()
            product_id = response.json().get('id')
            logger.info(f"  ✓ Product created: ID={product_id} ({time.time() - start_time:.2f}s)")
            return product_id
        except requests.exceptions.HTTPError as e:
            logger.error(f"  ✗ HTTP {e.response.status_code} creating product: {e.response.text[:200]}")
            return None
        except requests.exceptions.RequestException as e:
            logger.error(f"  ✗ Error creating product: {str(e)[:200]}")
            return None

    def set_stock(self, product_id: int, stock: int) -> bool:
        try:
            response = self.session.put(
                f'{self.base_url}/api/products/{product_id}/stock',
                json={'stock': stock},
                timeout=10
            )
            response.raise_for_status()
            logger.info(f"  ✓ Stock set: {stock}")
            return True
        except requests.exceptions.HTTPError as e:
            logger.warning(f"  ⚠ HTTP {e.response.status_code} setting stock: {e.response.text[:200]}")
            return False
        except requests.exceptions.RequestException as e:
            logger.warning(f"  ⚠ Error setting stock: {str(e)[:200]}")
            return False


def load_csv(file_path: str) -> List[Dict[str, str]]:
    """Load CSV file and return list of rows"""
    logger.info(f"Reading CSV file: {file_path}")
    with open(file_path, 'r', encoding='utf-8') as f:
        reader = csv.DictReader(f)
        rows = [{k: (v.strip() if v else '') for k, v in row.items()} for row in reader]
    logger.info(f"✓ Loaded {len(rows):,} rows from CSV")
    return rows


def main():
    parser = argparse.ArgumentParser(
        description='Seed products from a CSV file via the Storefront API',
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument('--csv', required=True, help='Path to product CSV file')
    parser.add_argument('--storefront-url', default='http://localhost:8000', help='Storefront service URL')
    parser.add_argument('--token', help='Admin auth token (JWT); alternative to --admin-email/--admin-password')
    parser.add_argument('--admin-email', help='Admin email used to log in')
    parser.add_argument('--admin-password', help='Admin password used to log in')
    parser.add_argument('--count', type=int, default=0, help='Maximum number of products to create (0 = all)')
    parser.add_argument('--delay', type=float, default=0.1, help='Delay between API calls (seconds)')

    args = parser.parse_args()
    if not args.token and not (args.admin_email and args.admin_password):
        parser.error('either --token or --admin-email and --admin-password are required')

    script_start_time = time.time()
    logger.info("=" * 70)
    logger.info("STOREFRONT PRODUCT SEEDING SCRIPT")
    logger.info("=" * 70)
    logger.info(f"Started at: {datetime.now().strftime('%Y-%m-%d %H:%M:%S')}")
    logger.info(f"  CSV file: {args.csv}")
    logger.info(f"  Storefront URL: {args.storefront_url}")

    rows = load_csv(args.csv)
    if args.count:
        rows = rows[:args.count]

    client = StorefrontAPIClient(args.storefront_url, args.token)
    if not args.token:
        client.login(args.admin_email, args.admin_password)

    success_count = 0
    skipped_count = 0
    error_count = 0

    for i, row in enumerate(rows, 1):
        product_data = map_row(row)
        if product_data is None:
            logger.warning(f"[{i}/{len(rows)}] ⚠ Skipping row without a name or a positive price")
            skipped_count += 1
            continue

        logger.info(f"[{i}/{len(rows)}] {product_data['name']}")
        product_id = client.create_product(product_data)
        if product_id is None:
            error_count += 1
            continue

        stock = parse_stock(row.get('stock', '0'))
        if stock > 0:
            client.set_stock(product_id, stock)
        success_count += 1
        time.sleep(args.delay)

    logger.info("=" * 70)
    logger.info(f"Created: {success_count} | Skipped: {skipped_count} | Failed: {error_count}")
    logger.info(f"Total time: {time.time() - script_start_time:.1f}s")


if __name__ == '__main__':
    main()
