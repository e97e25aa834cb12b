"""
Справочные данные, которых нет в разметке сайта.

- вершины и треккинговые маршруты для страницы приключений
- описание учётных записей портала для страниц входа/регистрации
- типы лицензий по умолчанию
"""

from dts_assistant.knowledge.models import AccountInfo, ReferencePeak, ReferenceTrek

DEFAULT_LICENSE_TYPES: tuple[str, ...] = (
    'Tour Operator License',
    'Hotel/Camping License',
    'Tour Guide License',
)

ACCOUNT_INFO = AccountInfo(
    account_types=[
        'Government Officials',
        'Tourism Operators',
        'Registered Businesses',
        'Authorized Personnel',
    ],
    eligibility='Only authorized personnel and registered tourism operators',
    requirements=[
        'Valid CNIC',
        'Business License (for operators)',
        'Official recommendation letter',
    ],
    process='Submit documents to DTS office for verification and approval',
)


def _peak(
    name: str, elevation: str, base_camp: str, difficulty: str, first_ascent: str = ''
) -> ReferencePeak:
    return ReferencePeak(
        name=name,
        elevation=elevation,
        base_camp=base_camp,
        first_ascent=first_ascent,
        difficulty=difficulty,
    )


ADVENTURE_PEAKS: tuple[ReferencePeak, ...] = (
    _peak('Baintha Brakk West-I', '6640 meters', 'Baintha Brakk Base Camp', 'Moderate', '1977'),
    _peak('Caumik Kangri', '6754 meters', 'Chumik Kangri Peak Base Camp', 'Moderate'),
    _peak('Gharkun Tower', '6620 meters', 'Gharkun Tower Base Camp', 'Moderate'),
    _peak('Depeak Peak', '7150 meters', 'Depeak Peak Base Camp', 'Moderate'),
    _peak('Ghent Peak II', '7342 meters', 'Ghent Peak Base Camp', 'Moderate'),
    _peak('Ghent Peak', '7401 meters', 'Ghent Peak Base Camp', 'Moderate'),
    _peak('Yazghil dome – N', '7110 meters', 'Yazghil Glacier / Hoper Valley', 'Moderate'),
    _peak('Yazghil dome – S', '7123 meters', 'Yazghil Glacier / Hoper Valley', 'Moderate'),
    _peak('Yakshin Garden – I', '7400 meters', 'Yazghil Glacier / Hispar Glacier', 'Moderate'),
    _peak('K2', '8611 meters', 'K2 Base Camp', 'Extreme', '1954'),
    _peak('Nanga Parbat', '8126 meters', 'Fairy Meadows', 'Extreme', '1953'),
    _peak('Broad Peak', '8051 meters', 'Broad Peak Base Camp', 'Extreme', '1957'),
    _peak('Gasherbrum I', '8080 meters', 'Gasherbrum Base Camp', 'Extreme', '1958'),
    _peak('Gasherbrum II', '8034 meters', 'Gasherbrum Base Camp', 'Extreme', '1956'),
)

_BALTORO_ROUTE = (
    'Islamabad-Skardu-Shigar-Askoli-Korophon-Paiju-Urdukas-Concordia, K-2 & Broad Peak BC-'
    'Gashabrum BC & return via same route to Skardu or cross Gondogoro La Or Vigne Pass, '
    'K-7, K-6 BC-Hushe-Skardu or Vice versa'
)

ADVENTURE_TREKS: tuple[ReferenceTrek, ...] = (
    ReferenceTrek(
        name='TRANGO TOWER/ SHIPTON', elevation='5000 meters', route=_BALTORO_ROUTE,
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='BALTORO – GONDOGORO- HUSHE', elevation='5000 meters', route=_BALTORO_ROUTE,
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='CHILINJI TREK',
        elevation='5291 meters',
        route='Chitral Ishkarwarz, Karambar Pass, Chilinji Pass, Chapursan Valley, Gilgit or vice versa',
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='DARKOT PASS',
        elevation='4703 meters',
        route='Chitral, Mastuj, Lasht, Darkut Pass, Ishkoman Gilgit or vice versa',
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='ARKARI TREK',
        elevation='6000 meters',
        route='Chitral, Shugur Biyasan, Babu Camp, Arkari, Garam Chashma, Shahgram, Chitral or vice versa',
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='Zindikharam Pass',
        elevation='4600 meters',
        route=(
            'Chitral, Shah Junali, Paur, Gazin, Lasht, Kishmanja, Ishkarwarz to Darkot Pass, '
            'or Karambar Pass, Zindikharam Pass, Ishkoman, Gilgit or vice versa'
        ),
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='SHAH – JUNALI – CHILLUI PASS',
        elevation='5291 meters',
        route=(
            'Chitral, Rua, Shah Junali, Lasht, Ishkarwarz, Karambar Pass, Chilinji Pass, '
            'Chapursan Valley, Gilgit & vice versa'
        ),
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='Khot Pass',
        elevation='4890 meters',
        route=(
            'Chitral, Turkhow, Khot Pass, Ochall, Ishkarwaz, Karambar Pass, Ishkoman Valley, '
            'Gilgit or vice versa'
        ),
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='ISHKOMAN & DARKUT PASSES',
        elevation='4650 meters',
        route='Gilgit, Ishkoman, Ishkoman Pass, Darkot, Darkot Pass, Baroghil to Mastuj & Back to Gilgit',
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='Fairy Meadows Trek',
        elevation='3300 meters',
        route='Raikot Bridge - Tato - Fairy Meadows - Beyal Camp - Nanga Parbat Base Camp',
        difficulty='Easy to Moderate',
    ),
    ReferenceTrek(
        name='Rush Lake Trek',
        elevation='4694 meters',
        route='Karimabad - Hoper Valley - Rush Lake',
        difficulty='Moderate',
    ),
    ReferenceTrek(
        name='Snow Lake Trek',
        elevation='4877 meters',
        route='Askole - Korofon - Biafo Glacier - Snow Lake - Hispar La - Hispar Glacier',
        difficulty='Difficult',
    ),
    ReferenceTrek(
        name='Rakaposhi Base Camp Trek',
        elevation='3899 meters',
        route='Minapin - Hapakun - Tagaphari - Rakaposhi Base Camp',
        difficulty='Moderate',
    ),
)
