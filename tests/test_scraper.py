from cash_report.scraper import degraded_content, extract_content

HTML = """
<html>
<head><title>Bright Dental | Austin Dentist</title></head>
<body>
  <header><nav>Home About Contact</nav></header>
  <h1>Gentle Family Dentistry</h1>
  <h2>Why patients choose us</h2>
  <h3> </h3>
  <p>We are   licensed and
     board certified.</p>
  <script>gtag('config', 'G-1');</script>
  <footer>Copyright</footer>
</body>
</html>
"""


def test_extract_content():
    content = extract_content(HTML, "https://bright.example")

    assert content.title == "Bright Dental | Austin Dentist"
    assert content.headings == ("Gentle Family Dentistry", "Why patients choose us")
    assert content.text == "Gentle Family Dentistry Why patients choose us We are licensed and board certified."
    assert "gtag(" in content.html
    assert content.url == "https://bright.example"


def test_title_falls_back_to_h1():
    content = extract_content("<html><body><h1>Acme Roofing</h1></body></html>", "https://acme.example")
    assert content.title == "Acme Roofing"


def test_degraded_content_uses_hostname():
    content = degraded_content("https://www.acme.example/contact")
    assert content.title == "www.acme.example"
    assert content.html == ""
    assert content.headings == ()
    assert "Scraping failed" in content.text
