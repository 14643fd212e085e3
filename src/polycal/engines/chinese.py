"""
polycal.engines.chinese
-----------------------
The Chinese lunisolar calendar, 1645-01-28 .. 3000-01-27.

Years are counted in 60-year cycles from the legendary start on -2636-02-15
(Gregorian), so the elapsed year number is the related Gregorian year + 2636.
Leap-month placement is not derived from solar terms here: it is read from the
historical table LEAP_MONTHS (elapsed year, leap month number). Months begin on the
local day of the true new moon; the local day is Beijing mean solar time
(116°25'E) before 1929-01-01 and UTC+8 afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Tuple

from polycal.core.errors import InvalidDate, OutOfRange
from polycal.core.time import gregorian_epoch_day
from polycal.core.types import EastAsianMonth, Leniency, MonthSpec, coerce_month
from polycal.engines.eras import EraEntry, EraResolver
from polycal.engines.lunisolar import (
    build_lunisolar_table,
    lmt_offset_hours,
    nearest_lunation,
    switched_offset,
)

ELAPSED_OFFSET = 2636          # elapsed year = gregorian year + 2636
MIN_ELAPSED = 1645 + ELAPSED_OFFSET
MAX_ELAPSED = 2999 + ELAPSED_OFFSET
FIRST_NEW_YEAR = gregorian_epoch_day(1645, 1, 28)   # cycle 72, year 22

BEIJING_LONGITUDE = 116.0 + 25.0 / 60.0
UTC8_SINCE = gregorian_epoch_day(1929, 1, 1)

# Hong Kong Observatory places these two new moons (00:00:37 and 00:01:47, UTC+8)
# on the later day; the series above lands a few seconds before midnight.
NEW_MOON_EXCEPTIONS: Dict[int, int] = {
    gregorian_epoch_day(2057, 9, 28): gregorian_epoch_day(2057, 9, 29),
    gregorian_epoch_day(2097, 8, 7): gregorian_epoch_day(2097, 8, 8),
}

# see also: http://www.math.nus.edu.sg/aslaksen/calendar/LeapMonths.nb
LEAP_MONTHS: Tuple[int, ...] = (
    4281, 5, 4284, 4, 4287, 1, 4289, 6, 4292, 5, 4295, 3, 4297, 8, 4300, 6, 4303, 4, 4306, 2,
    4308, 7, 4311, 5, 4314, 3, 4316, 8, 4319, 6, 4322, 4, 4325, 3, 4327, 7, 4330, 5, 4333, 3,
    4335, 7, 4338, 6, 4341, 4, 4344, 3, 4346, 7, 4349, 5, 4352, 3, 4354, 8, 4357, 6, 4360, 4,
    4363, 2, 4365, 7, 4368, 5, 4371, 4, 4373, 9, 4376, 6, 4379, 4, 4382, 3, 4384, 7, 4387, 5,
    4390, 4, 4392, 9, 4395, 6, 4398, 5, 4401, 2, 4403, 7, 4406, 5, 4409, 3, 4411, 10, 4414, 6,
    4417, 5, 4420, 3, 4422, 7, 4425, 5, 4428, 4, 4431, 2, 4433, 6, 4436, 4, 4439, 2, 4441, 7,
    4444, 5, 4447, 3, 4450, 2, 4452, 6, 4455, 4, 4458, 3, 4460, 7, 4463, 5, 4466, 4, 4468, 9,
    4471, 6, 4474, 4, 4477, 3, 4479, 7, 4482, 5, 4485, 4, 4487, 8, 4490, 7, 4493, 5, 4496, 3,
    4498, 8, 4501, 5, 4504, 4, 4506, 10, 4509, 6, 4512, 5, 4515, 3, 4517, 7, 4520, 5, 4523, 4,
    4526, 2, 4528, 6, 4531, 5, 4534, 3, 4536, 8, 4539, 5, 4542, 4, 4545, 2, 4547, 6, 4550, 5,
    4553, 2, 4555, 7, 4558, 5, 4561, 4, 4564, 2, 4566, 6, 4569, 5, 4572, 3, 4574, 7, 4577, 6,
    4580, 4, 4583, 2, 4585, 7, 4588, 5, 4591, 3, 4593, 8, 4596, 6, 4599, 4, 4602, 3, 4604, 7,
    4607, 5, 4610, 4, 4612, 8, 4615, 6, 4618, 4, 4620, 10, 4623, 6, 4626, 5, 4629, 3, 4631, 8,
    4634, 5, 4637, 4, 4640, 2, 4642, 7, 4645, 5, 4648, 4, 4650, 9, 4653, 6, 4656, 4, 4659, 2,
    4661, 6, 4664, 5, 4667, 3, 4669, 11, 4672, 6, 4675, 5, 4678, 2, 4680, 7, 4683, 5, 4686, 3,
    4688, 8, 4691, 6, 4694, 4, 4697, 3, 4699, 7, 4702, 5, 4705, 4, 4707, 8, 4710, 6, 4713, 4,
    4716, 3, 4718, 7, 4721, 5, 4724, 4, 4726, 8, 4729, 6, 4732, 4, 4735, 2, 4737, 7, 4740, 5,
    4743, 4, 4745, 9, 4748, 6, 4751, 4, 4754, 3, 4756, 7, 4759, 5, 4762, 4, 4764, 11, 4767, 6,
    4770, 5, 4773, 2, 4775, 7, 4778, 5, 4781, 4, 4783, 11, 4786, 6, 4789, 5, 4792, 3, 4794, 7,
    4797, 6, 4800, 4, 4802, 10, 4805, 6, 4808, 5, 4811, 3, 4813, 7, 4816, 6, 4819, 4, 4822, 2,
    4824, 6, 4827, 5, 4830, 3, 4832, 7, 4835, 6, 4838, 4, 4840, 9, 4843, 6, 4846, 4, 4849, 3,
    4851, 7, 4854, 5, 4857, 4, 4859, 9, 4862, 7, 4865, 5, 4868, 3, 4870, 8, 4873, 5, 4876, 4,
    4878, 11, 4881, 6, 4884, 5, 4887, 3, 4889, 7, 4892, 6, 4895, 5, 4898, 1, 4900, 7, 4903, 5,
    4906, 3, 4908, 8, 4911, 6, 4914, 4, 4917, 2, 4919, 6, 4922, 5, 4925, 3, 4927, 7, 4930, 6,
    4933, 4, 4936, 2, 4938, 6, 4941, 5, 4944, 3, 4946, 7, 4949, 6, 4952, 4, 4954, 10, 4957, 7,
    4960, 5, 4963, 3, 4965, 8, 4968, 6, 4971, 4, 4974, 3, 4976, 7, 4979, 5, 4982, 4, 4984, 8,
    4987, 6, 4990, 5, 4993, 1, 4995, 7, 4998, 5, 5001, 4, 5003, 8, 5006, 6, 5009, 5, 5012, 2,
    5014, 7, 5017, 5, 5020, 4, 5022, 10, 5025, 6, 5028, 4, 5031, 2, 5033, 6, 5036, 5, 5039, 3,
    5041, 8, 5044, 6, 5047, 5, 5050, 2, 5052, 7, 5055, 5, 5058, 3, 5060, 8, 5063, 6, 5066, 4,
    5069, 3, 5071, 7, 5074, 5, 5077, 4, 5079, 8, 5082, 7, 5085, 5, 5088, 3, 5090, 8, 5093, 5,
    5096, 4, 5098, 8, 5101, 6, 5104, 5, 5107, 3, 5109, 7, 5112, 5, 5115, 4, 5117, 10, 5120, 6,
    5123, 5, 5126, 3, 5128, 7, 5131, 5, 5134, 4, 5136, 10, 5139, 6, 5142, 5, 5145, 2, 5147, 7,
    5150, 5, 5153, 4, 5156, 1, 5158, 6, 5161, 5, 5164, 3, 5166, 7, 5169, 6, 5172, 4, 5175, 1,
    5177, 7, 5180, 5, 5183, 3, 5185, 7, 5188, 6, 5191, 4, 5193, 8, 5196, 7, 5199, 5, 5202, 4,
    5204, 7, 5207, 6, 5210, 4, 5212, 9, 5215, 7, 5218, 5, 5221, 3, 5223, 7, 5226, 6, 5229, 4,
    5231, 10, 5234, 7, 5237, 5, 5240, 3, 5242, 8, 5245, 6, 5248, 4, 5250, 11, 5253, 6, 5256, 5,
    5259, 3, 5261, 8, 5264, 6, 5267, 5, 5270, 1, 5272, 7, 5275, 5, 5278, 3, 5280, 8, 5283, 6,
    5286, 4, 5289, 2, 5291, 7, 5294, 5, 5297, 3, 5299, 7, 5302, 6, 5305, 4, 5308, 3, 5310, 7,
    5313, 5, 5316, 3, 5318, 7, 5321, 6, 5324, 4, 5327, 3, 5329, 7, 5332, 5, 5335, 3, 5337, 8,
    5340, 6, 5343, 4, 5346, 2, 5348, 7, 5351, 5, 5354, 4, 5356, 9, 5359, 6, 5362, 5, 5364, 11,
    5367, 7, 5370, 5, 5373, 4, 5375, 9, 5378, 6, 5381, 5, 5384, 2, 5386, 7, 5389, 6, 5392, 4,
    5394, 8, 5397, 6, 5400, 5, 5403, 3, 5405, 7, 5408, 6, 5411, 4, 5413, 8, 5416, 6, 5419, 5,
    5422, 3, 5424, 7, 5427, 6, 5430, 3, 5432, 8, 5435, 6, 5438, 4, 5441, 3, 5443, 7, 5446, 6,
    5449, 4, 5451, 9, 5454, 7, 5457, 5, 5460, 3, 5462, 8, 5465, 5, 5468, 4, 5470, 9, 5473, 6,
    5476, 5, 5479, 3, 5481, 8, 5484, 6, 5487, 4, 5489, 9, 5492, 6, 5495, 5, 5498, 3, 5500, 7,
    5503, 6, 5506, 4, 5508, 10, 5511, 6, 5514, 5, 5517, 3, 5519, 7, 5522, 6, 5525, 4, 5527, 10,
    5530, 6, 5533, 5, 5536, 3, 5538, 7, 5541, 6, 5544, 4, 5546, 11, 5549, 7, 5552, 5, 5555, 3,
    5557, 8, 5560, 6, 5563, 4, 5565, 9, 5568, 7, 5571, 5, 5574, 4, 5576, 8, 5579, 6, 5582, 4,
    5584, 8, 5587, 7, 5590, 5, 5593, 4, 5595, 8, 5598, 6, 5601, 5, 5603, 10, 5606, 7, 5609, 5,
    5612, 3, 5614, 8, 5617, 6, 5620, 4, 5622, 10, 5625, 6, 5628, 5, 5631, 3, 5633, 8, 5636, 6
)


_LEAP: Dict[int, int] = dict(zip(LEAP_MONTHS[0::2], LEAP_MONTHS[1::2]))

STEMS = ("jia", "yi", "bing", "ding", "wu", "ji", "geng", "xin", "ren", "gui")
BRANCHES = ("zi", "chou", "yin", "mao", "chen", "si", "wu", "wei", "shen", "you", "xu", "hai")


def elapsed_of(cycle: int, year_of_cycle: int) -> int:
    return (cycle - 1) * 60 + year_of_cycle - 1


def cycle_of(elapsed: int) -> Tuple[int, int]:
    return elapsed // 60 + 1, elapsed % 60 + 1


def sexagesimal_name(year_of_cycle: int) -> str:
    """Stem-branch name of a year of the cycle, e.g. 37 -> 'geng-zi'."""
    i = year_of_cycle - 1
    return f"{STEMS[i % 10]}-{BRANCHES[i % 12]}"


@dataclass(frozen=True)
class ChineseDate:
    cycle: int
    year_of_cycle: int
    month: EastAsianMonth
    day: int

    @property
    def elapsed_year(self) -> int:
        return elapsed_of(self.cycle, self.year_of_cycle)

    @property
    def related_gregorian_year(self) -> int:
        return self.elapsed_year - ELAPSED_OFFSET

    @property
    def year_name(self) -> str:
        return sexagesimal_name(self.year_of_cycle)

    def __str__(self) -> str:
        return f"chinese[{self.cycle}({self.year_of_cycle})-{self.month}-{self.day:02d}]"


class ChineseEra(Enum):
    """Qing reigns (first related Gregorian year) and the Yellow Emperor reckoning."""
    QING_SHUNZHI_1644 = 1644
    QING_KANGXI_1662 = 1662
    QING_YONGZHENG_1723 = 1723
    QING_QIANLONG_1736 = 1736
    QING_JIAQING_1796 = 1796
    QING_DAOGUANG_1821 = 1821
    QING_XIANFENG_1851 = 1851
    QING_TONGZHI_1862 = 1862
    QING_GUANGXU_1875 = 1875
    QING_XUANTONG_1909 = 1909
    YELLOW_EMPEROR = -2697

    @property
    def first_related_year(self) -> int:
        return self.value

    def is_qing(self) -> bool:
        return self is not ChineseEra.YELLOW_EMPEROR


QING_END = gregorian_epoch_day(1912, 2, 11)


def get_leap_month_elapsed(elapsed: int) -> Optional[int]:
    return _LEAP.get(elapsed)


class ChineseCalendar:
    """Sexagesimal lunisolar calendar; linear year = elapsed year."""

    variant = "chinese"

    def __init__(self) -> None:
        self.offset = switched_offset(lmt_offset_hours(BEIJING_LONGITUDE), 8.0, UTC8_SINCE)
        first_k = nearest_lunation(FIRST_NEW_YEAR, self.offset, NEW_MOON_EXCEPTIONS)
        self.table = build_lunisolar_table(
            self.variant,
            MIN_ELAPSED,
            MAX_ELAPSED,
            first_k,
            get_leap_month_elapsed,
            self.offset,
            overrides=NEW_MOON_EXCEPTIONS,
        )
        self.eras = self._build_eras()

    # ---------------------------------------------------------
    # Leap months
    # ---------------------------------------------------------
    def get_leap_month(self, cycle: int, year_of_cycle: int) -> Optional[int]:
        """Number of the leap month of that year, or None."""
        return get_leap_month_elapsed(elapsed_of(cycle, year_of_cycle))

    def is_leap_year(self, year: int) -> bool:
        return get_leap_month_elapsed(year) is not None

    # ---------------------------------------------------------
    # Range and lengths (linear year = elapsed year)
    # ---------------------------------------------------------
    @property
    def min_epoch_day(self) -> int:
        return self.table.first_day

    @property
    def max_epoch_day(self) -> int:
        return self.table.last_day

    @property
    def min_year(self) -> int:
        return MIN_ELAPSED

    @property
    def max_year(self) -> int:
        return MAX_ELAPSED

    def months(self, year: int) -> List[EastAsianMonth]:
        self.table.check_year(year)
        return self.table.months(year)

    def length_of_month(self, year: int, month: MonthSpec) -> int:
        return self.table.length_of(year, coerce_month(month))

    def length_of_year(self, year: int) -> int:
        return self.table.length_of_year(year)

    def is_valid(self, year: int, month: MonthSpec, day: int) -> bool:
        if not (MIN_ELAPSED <= year <= MAX_ELAPSED):
            return False
        m = coerce_month(month)
        if m.leap and get_leap_month_elapsed(year) != m.number:
            return False
        return 1 <= day <= self.table.length_of(year, m)

    def year_of(self, date: ChineseDate) -> int:
        return date.elapsed_year

    def create(self, year: int, month: MonthSpec, day: int) -> ChineseDate:
        if not (MIN_ELAPSED <= year <= MAX_ELAPSED):
            raise OutOfRange(f"Chinese year out of range: elapsed {year}")
        m = coerce_month(month)
        if not self.is_valid(year, m, day):
            raise InvalidDate(f"Invalid Chinese date: elapsed {year}, month {m}, day {day}")
        cycle, yoc = cycle_of(year)
        return ChineseDate(cycle, yoc, m, day)

    def of(self, cycle: int, year_of_cycle: int, month: MonthSpec, day: int) -> ChineseDate:
        if not (1 <= year_of_cycle <= 60):
            raise InvalidDate(f"Year of cycle out of range 1..60: {year_of_cycle}")
        return self.create(elapsed_of(cycle, year_of_cycle), month, day)

    # ---------------------------------------------------------
    # Transform
    # ---------------------------------------------------------
    def to_epoch_day(self, date: ChineseDate) -> int:
        self.create(date.elapsed_year, date.month, date.day)
        return self.table.start_of(date.elapsed_year, date.month) + date.day - 1

    def from_epoch_day(self, epoch_day: int) -> ChineseDate:
        idx = self.table.search(epoch_day)
        year, month = self.table.locate(idx)
        cycle, yoc = cycle_of(year)
        return ChineseDate(cycle, yoc, month, epoch_day - int(self.table.starts[idx]) + 1)

    def new_year(self, gregorian_year: int) -> int:
        """Epoch-day of the Chinese new year falling in `gregorian_year`."""
        return self.table.start_of(gregorian_year + ELAPSED_OFFSET, EastAsianMonth(1))

    # ---------------------------------------------------------
    # Eras
    # ---------------------------------------------------------
    def _build_eras(self) -> EraResolver[ChineseEra]:
        entries: List[EraEntry[ChineseEra]] = []
        for era in ChineseEra:
            if era is ChineseEra.YELLOW_EMPEROR:
                continue
            start = self.min_epoch_day if era is ChineseEra.QING_SHUNZHI_1644 else self.new_year(era.value)
            entries.append(EraEntry(era, era.value, start))
        # after the abdication only the Yellow Emperor count remains
        entries.append(EraEntry(ChineseEra.YELLOW_EMPEROR, ChineseEra.YELLOW_EMPEROR.value, QING_END + 1))
        return EraResolver(entries)

    def era_of(self, date: ChineseDate) -> ChineseEra:
        return self.eras.find(self.to_epoch_day(date)).era

    def year_of_era(self, date: ChineseDate, era: Optional[ChineseEra] = None) -> int:
        """
        Year of `era` (default: the era in force). The Yellow Emperor count applies to
        every date; a Qing reign only to dates inside it.
        """
        if era is None:
            era = self.era_of(date)
        related = date.related_gregorian_year
        if era is ChineseEra.YELLOW_EMPEROR:
            return related - era.value + 1
        if self.era_of(date) is not era:
            raise OutOfRange(f"{date} is not in era {era.name}")
        return related - era.value + 1

    def max_year_of_era(self, era: ChineseEra) -> int:
        if era is ChineseEra.YELLOW_EMPEROR:
            return MAX_ELAPSED - ELAPSED_OFFSET - era.value + 1
        return self.eras.max_year_of_era(
            era, lambda d: self.from_epoch_day(d).related_gregorian_year, self.max_epoch_day)

    def linear_year(self, era: ChineseEra, year_of_era: int) -> int:
        return era.value + year_of_era - 1 + ELAPSED_OFFSET

    def of_era(
        self,
        era: ChineseEra,
        year_of_era: int,
        month: MonthSpec,
        day: int,
        leniency: Leniency = Leniency.SMART,
    ) -> ChineseDate:
        """
        Build a date from era fields. A Qing reign is checked against the day under
        `leniency`; the Yellow Emperor count is valid for every date. The date itself
        does not store the era, so SMART and LAX yield the same day.
        """
        if year_of_era < 1:
            raise OutOfRange(f"Year of era must be >= 1: {year_of_era}")
        date = self.create(self.linear_year(era, year_of_era), month, day)
        if era.is_qing():
            self.eras.resolve(era, self.to_epoch_day(date), leniency)
        return date
