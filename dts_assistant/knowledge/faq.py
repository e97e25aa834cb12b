"""
Частые вопросы и резервный текст базы знаний.

DEFAULT_FAQ записывается в каждый документ полного обхода.
FALLBACK_KNOWLEDGE отдаётся чату, если базы знаний нет или пайплайн упал.
"""

from dts_assistant.knowledge.models import FaqEntry

DEFAULT_FAQ: tuple[FaqEntry, ...] = (
    FaqEntry(
        question='What is DTS?',
        answer=(
            'DTS (Directorate of Tourism Services) is the official government department for '
            'tourism in Gilgit-Baltistan, Pakistan. It manages tourism services, licensing, '
            "permits, and promotes the region's natural beauty."
        ),
    ),
    FaqEntry(
        question='How do I apply for tourism licenses in Gilgit-Baltistan?',
        answer=(
            'You can apply for various tourism licenses including Tour Operator License, '
            'Hotel/Camping License, and Tour Guide License through the DTS online portal at '
            'https://app.dtsgb.gog.pk/app after creating an account.'
        ),
    ),
    FaqEntry(
        question='What are the fees for expeditions and tourism services?',
        answer=(
            'DTS has different fee structures for general tourism services and expedition fees. '
            'Detailed fee information is available on the official website under the '
            'Fees & Expeditions section.'
        ),
    ),
    FaqEntry(
        question='How can I get a tourist visa for Gilgit-Baltistan?',
        answer=(
            'Tourist visa information, eligibility criteria, required documents, and application '
            'process are available on the DTS website. You can apply online and check all '
            'requirements before visiting.'
        ),
    ),
    FaqEntry(
        question='What mountaineering opportunities are available in Gilgit-Baltistan?',
        answer=(
            'Gilgit-Baltistan offers world-class mountaineering opportunities including K2, '
            'Nanga Parbat, and many other peaks. DTS provides information on historical summits, '
            'upcoming expeditions, and successful climbers.'
        ),
    ),
    FaqEntry(
        question='Where can I find the latest news and advisories for tourism in Gilgit-Baltistan?',
        answer=(
            'The latest tourism news, advisories, and safety updates are regularly published on '
            "the DTS website's News & Advisories section. This includes important travel "
            'information and expedition updates.'
        ),
    ),
    FaqEntry(
        question='What adventure activities are available in Gilgit-Baltistan?',
        answer=(
            'The region offers various mountain adventures including trekking, mountaineering, '
            'rock climbing, river rafting, and cultural tours. Information about these activities '
            'is available through DTS services.'
        ),
    ),
    FaqEntry(
        question='How can I contact DTS for support?',
        answer=(
            'You can contact DTS through multiple channels: Phone: +92-5811-920001, '
            'Email: info@dtsgb.gog.pk, Helpline: 1422, or visit their office at Directorate of '
            'Tourism Services, Gilgit-Baltistan.'
        ),
    ),
    FaqEntry(
        question='What are the popular destinations in Gilgit-Baltistan?',
        answer=(
            'Popular destinations include Skardu (gateway to K2), Hunza Valley, Fairy Meadows '
            '(Nanga Parbat base camp), Deosai National Park, Khunjerab Pass, and many other '
            'stunning locations with rich cultural heritage.'
        ),
    ),
    FaqEntry(
        question='What regulations should tourists be aware of?',
        answer=(
            'Tourists should be aware of local regulations regarding permits, protected areas, '
            'cultural sensitivities, and safety guidelines. Complete regulation information is '
            'available through DTS official channels.'
        ),
    ),
)

FALLBACK_KNOWLEDGE = """
DTS GILGIT-BALTISTAN FALLBACK KNOWLEDGE BASE

WHAT IS DTS?
DTS (Directorate of Tourism Services) Gilgit-Baltistan is the official government department responsible for tourism in the region.

LOGIN INFORMATION:
- Login URL: https://app.dtsgb.gog.pk/auth/login
- Only authorized personnel can access
- For account issues, contact: +92-5811-920001

SERVICES:
• Tourist Information and Guidance
• Travel Permits and Documentation
• Tourism Infrastructure Development
• Tourist Safety and Security
• Adventure Tourism Facilitation

POPULAR DESTINATIONS:
• Skardu - Gateway to K2 and Baltoro Glacier
• Hunza Valley - Beautiful valley with stunning views
• Fairy Meadows - Base camp for Nanga Parbat
• Deosai National Park - High altitude plateau

CONTACT:
Phone: +92-5811-920001
Email: info@dtsgb.gog.pk
Helpline: 1422
Website: https://dtsgb.gog.pk/
"""
