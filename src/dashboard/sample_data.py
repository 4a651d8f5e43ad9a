# src/dashboard/sample_data.py
"""Built-in sample inputs offered by the dashboard, 60 days each."""

SAMPLE_DATA_1 = (
    "1200,1320,1250,1280,1400,1550,1500,1230,1310,1270,1295,1420,1570,1520,"
    "1245,1335,1290,1300,1440,1590,1545,1260,1350,1305,1320,1460,1610,1560,"
    "1275,1365,1320,1340,1480,1630,1580,1290,1380,1335,1355,1500,1650,1600,"
    "1305,1395,1350,1370,1520,1670,1620,1320,1410,1365,1390,1540,1690,1640,"
    "1335,1425,1380,1405"
)

SAMPLE_DATA_2 = (
    "850,870,880,905,910,930,955,960,985,1000,1010,1035,1050,1060,1080,"
    "1105,1110,1130,1150,1165,1180,1200,1215,1230,1255,1260,1285,1300,1310,"
    "1335,1350,1360,1380,1405,1410,1430,1450,1465,1480,1500,1515,1530,1555,"
    "1560,1585,1600,1610,1635,1650,1660,1680,1705,1710,1730,1750,1765,1780,"
    "1800,1815,1830"
)

SAMPLE_DATA_3 = (
    "2400,2380,2350,2390,2600,2900,3100,2300,2280,2260,2310,2550,2850,3050,"
    "2250,2220,2200,2240,2480,2780,2990,2180,2160,2150,2190,2430,2720,2940,"
    "2120,2100,2080,2130,2380,2660,2880,2070,2050,2030,2080,2320,2610,2830,"
    "2010,1990,1980,2020,2270,2550,2780,1960,1940,1930,1970,2220,2500,2720,"
    "1910,1890,1880,1920"
)

SAMPLES = {
    "Use sample data_1": SAMPLE_DATA_1,
    "Use sample data_2": SAMPLE_DATA_2,
    "Use sample data_3": SAMPLE_DATA_3,
}
