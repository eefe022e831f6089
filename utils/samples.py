from loguru import logger

from errors import ReciteError

SAMPLE_TITLE = "Seven-Line Prayer & Vajra Guru Mantra"
SAMPLE_CATEGORY = "Prayer"
SAMPLE_LINES = [
    {"text": "HUNG", "pronunciation": "Er Hoong", "translation": ""},
    {"text": "Ogyen yulgyi nupchang tsam", "pronunciation": "Uh-gen yool-gyi noob-chang tsam", "translation": "In the north-west of the country of Uddiyana,"},
    {"text": "Pema kesar dongpo la", "pronunciation": "Pay-ma kay-sar dong-po la", "translation": "In the heart of a lotus flower,"},
    {"text": "Yamtsen chokgi ngodrup nye", "pronunciation": "Yam-tsen chok-gi ngeu-drup nyeh", "translation": "You are endowed with the supreme, wondrous siddhis,"},
    {"text": "Pema jungne shyesu drak", "pronunciation": "Pay-ma Jung-neh shyeh-soo drak", "translation": "And are renowned as the Lotus Born."},
    {"text": "Khordu khandro mangpo kor", "pronunciation": "Khor-doo khan-dro mang-peu kor", "translation": "Surrounded by a host of many dakinis"},
    {"text": "Chyechyi jesu dagdrup kyi", "pronunciation": "Chyeh-chyi jeh-soo dak-drup kyee", "translation": "I will practice by following your example."},
    {"text": "Chingyi lapchir sheksu sol", "pronunciation": "Ching-yee lap-cheer shek-soo sol", "translation": "Please approach and grant your blessings!"},
    {"text": "GURU PEMA SIDDHI HUNG", "pronunciation": "Guru Pay-ma Siddhi Hoong", "translation": ""},
    {"text": "OM AH HUNG BENZAR GURU PEMA SIDDHI HUNG", "pronunciation": "Om Ah Hoong Ben-zar Guru Pay-ma Sidd-hi Hoong", "translation": "May the blessings of the Lotus-Born Guru bring spiritual accomplishment."},
    {"text": "OM AH HUNG BENZAR GURU PEMA THOTRENG TSAL", "pronunciation": "Om Ah Hoong Ben-zar Guru Pay-ma Tho-treng Tsal", "translation": "Melody of Thotreng Tsal"},
    {"text": "BENZAR SAMAYA DZA SIDDHI PHALA HUNG AH", "pronunciation": "Ben-zar Sa-ma-ya Dza Sidd-hi Pa-la Hoong Ah", "translation": ""},
]


async def preload_sample_text(api) -> bool:
    """Add the sample prayer through the facade when the library is empty."""
    try:
        texts = await api("GET", "getTexts")
        if texts:
            return False
        await api("POST", "addText", {
            "title": SAMPLE_TITLE,
            "category": SAMPLE_CATEGORY,
            "lines": SAMPLE_LINES,
        })
    except ReciteError as exc:
        logger.warning(f"Sample preload failed: {exc}")
        return False
    logger.info(f"Preloaded sample text '{SAMPLE_TITLE}'")
    return True
