# bonus/config.py
from decimal import Decimal
from typing import Dict, Any, Tuple


class CommissionConfig:
    """
    Referral commission configuration with level-based percentages
    Level 1 (immediate referrer): 25%, Level 2: 15%, Level 3: 10%, Level 4: 8%,
    Level 5: 6%, Level 6: 5%, Level 7: 4%, Level 8: 3%, Level 9: 2%, Level 10: 1%
    """

    # Flat membership fee the percentages apply to
    PAYMENT_AMOUNT = Decimal('100')

    COMMISSION_PERCENTAGES = {
        1: Decimal('0.25'),
        2: Decimal('0.15'),
        3: Decimal('0.10'),
        4: Decimal('0.08'),
        5: Decimal('0.06'),
        6: Decimal('0.05'),
        7: Decimal('0.04'),
        8: Decimal('0.03'),
        9: Decimal('0.02'),
        10: Decimal('0.01'),
    }

    MAX_LEVEL = 10

    @staticmethod
    def get_rate(level: int) -> Decimal:
        """Percentage for a level; zero outside 1..MAX_LEVEL."""
        if not isinstance(level, int) or level < 1 or level > CommissionConfig.MAX_LEVEL:
            return Decimal('0')
        return CommissionConfig.COMMISSION_PERCENTAGES[level]

    @staticmethod
    def get_commission_amount(level: int) -> Decimal:
        amount = CommissionConfig.PAYMENT_AMOUNT * CommissionConfig.get_rate(level)
        return amount.quantize(Decimal('0.01'))

    @staticmethod
    def get_distribution_summary() -> Dict[str, Any]:
        """Get summary of commission distribution across all levels"""
        distribution = {}
        total_percentage = Decimal('0')

        for level in range(1, CommissionConfig.MAX_LEVEL + 1):
            percentage = CommissionConfig.get_rate(level)
            distribution[level] = {
                'percentage': float(percentage),
                'percentage_display': f"{float(percentage) * 100:g}%",
                'amount': float(CommissionConfig.get_commission_amount(level)),
            }
            total_percentage += percentage

        return {
            'distribution': distribution,
            'total_percentage': float(total_percentage),
            'max_level': CommissionConfig.MAX_LEVEL,
            'payment_amount': float(CommissionConfig.PAYMENT_AMOUNT),
        }

    @staticmethod
    def validate_configuration() -> Tuple[bool, str]:
        """Validate that commission configuration is mathematically sound"""
        levels = sorted(CommissionConfig.COMMISSION_PERCENTAGES)
        if levels != list(range(1, CommissionConfig.MAX_LEVEL + 1)):
            return False, f"Commission levels must cover 1..{CommissionConfig.MAX_LEVEL}, got {levels}"

        rates = [CommissionConfig.COMMISSION_PERCENTAGES[level] for level in levels]
        if any(rate <= 0 for rate in rates):
            return False, "Commission percentages must be positive"

        if any(later > earlier for earlier, later in zip(rates, rates[1:])):
            return False, "Commission percentages must not increase with depth"

        total_percentage = sum(rates)
        # The whole chain must never be paid more than the fee itself
        if total_percentage > Decimal('1'):
            return False, f"Total commission percentage too high: {total_percentage * 100}%"

        return True, f"Commission configuration valid: {total_percentage * 100:.1f}% total across {CommissionConfig.MAX_LEVEL} levels"
