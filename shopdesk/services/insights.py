"""
Business Insights
Google Gemini generateContent REST API for AI-written business reports
https://ai.google.dev/api/generate-content
"""

import json
import logging
from collections import Counter

import requests
from flask import current_app

from shopdesk.exceptions import InsightsError
from shopdesk.utils.helpers import money

logger = logging.getLogger(__name__)

PROMPT_TEMPLATE = """You are a retail business analyst for {business_name}, a small shop \
trading in {currency}.

Analyze the inventory and sales data below and write a concise business report in markdown with:
1. Inventory health: low stock items that need restocking and overstocked items.
2. Sales trends: best performers and slow movers.
3. Profitability: margins and the most profitable products.
4. Three actionable recommendations.

Data (JSON):
{snapshot}
"""


def build_snapshot(inventory, sales, recent_limit=20, top_limit=5):
    """
    Serialize the data the model is asked about

    Args:
        inventory: InventoryItem list
        sales: SaleRecord list, newest first
        recent_limit: Number of recent sales to include
        top_limit: Number of top sellers to include

    Returns:
        dict: JSON-serializable snapshot
    """
    units_sold = Counter()
    for sale in sales:
        for line in sale.items:
            units_sold[line.name] += line.quantity

    return {
        'inventory': [{
            'name': item.name,
            'category': item.category,
            'quantity': item.quantity,
            'costPrice': money(item.cost_price),
            'salesPrice': money(item.sales_price),
            'lowStockThreshold': item.low_stock_threshold,
            'isLowStock': item.is_low_stock,
        } for item in inventory],
        'sales': {
            'count': len(sales),
            'totalRevenue': money(sum(s.total_amount for s in sales)),
            'totalProfit': money(sum(s.total_profit for s in sales)),
            'topSellers': [
                {'name': name, 'unitsSold': units}
                for name, units in units_sold.most_common(top_limit)
            ],
            'recent': [{
                'timestamp': sale.timestamp.isoformat(),
                'items': [{'name': line.name, 'quantity': line.quantity} for line in sale.items],
                'totalAmount': money(sale.total_amount),
                'totalProfit': money(sale.total_profit),
            } for sale in sales[:recent_limit]],
        },
    }


class GeminiInsights:
    """Thin wrapper around the Gemini generateContent endpoint"""

    def __init__(self, api_key=None, model=None, api_url=None, timeout=None):
        config = current_app.config
        self.api_key = api_key or config.get('GEMINI_API_KEY')
        self.model = model or config.get('GEMINI_MODEL')
        self.api_url = (api_url or config.get('GEMINI_API_URL', '')).rstrip('/')
        self.timeout = timeout or config.get('AI_REQUEST_TIMEOUT', 60)

    @property
    def endpoint(self):
        return f"{self.api_url}/models/{self.model}:generateContent"

    def _get_headers(self):
        return {
            "x-goog-api-key": self.api_key,
            "Content-Type": "application/json"
        }

    def generate(self, prompt):
        """
        Send a single-turn prompt

        Returns:
            str: Generated text

        Raises:
            InsightsError: if the API is not configured or the call fails
        """
        if not self.api_key:
            raise InsightsError('AI insights not configured. Please add GEMINI_API_KEY to your configuration.')

        payload = {
            "contents": [{
                "role": "user",
                "parts": [{"text": prompt}]
            }]
        }

        try:
            response = requests.post(
                self.endpoint,
                headers=self._get_headers(),
                json=payload,
                timeout=self.timeout
            )
        except requests.exceptions.Timeout:
            logger.warning(f"Gemini request timed out after {self.timeout}s")
            raise InsightsError('AI service timed out. Please try again.')
        except requests.exceptions.RequestException as e:
            logger.error(f"Gemini request failed: {e}")
            raise InsightsError('Could not reach the AI service. Please check connection.')

        try:
            result = response.json()
        except ValueError:
            result = {}

        if response.status_code != 200:
            error_msg = result.get('error', {}).get('message', 'Unknown error')
            logger.error(f"Gemini returned {response.status_code}: {error_msg}")
            raise InsightsError(f'AI service error: {error_msg}')

        text = self._extract_text(result)
        if not text:
            raise InsightsError('AI service returned no analysis.')
        return text

    @staticmethod
    def _extract_text(result):
        candidates = result.get('candidates') or []
        if not candidates:
            return ''
        parts = (candidates[0].get('content') or {}).get('parts') or []
        return ''.join(part.get('text', '') for part in parts).strip()


def generate_business_insights(inventory, sales, client=None):
    """
    Ask the model for a business report on the current shop data

    Returns:
        str: Markdown analysis
    """
    config = current_app.config
    snapshot = build_snapshot(
        inventory, sales,
        recent_limit=config.get('AI_RECENT_SALES_LIMIT', 20)
    )
    prompt = PROMPT_TEMPLATE.format(
        business_name=config.get('BUSINESS_NAME'),
        currency=config.get('CURRENCY'),
        snapshot=json.dumps(snapshot, indent=2)
    )

    client = client or GeminiInsights()
    logger.info(f"Requesting insights for {len(inventory)} items and {len(sales)} sales")
    return client.generate(prompt)
